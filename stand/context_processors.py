from .auth import current_user


def stand_user(request):
    return {"stand_user": current_user(request)}
