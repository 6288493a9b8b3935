from functools import wraps

from django.shortcuts import redirect

SESSION_USER_ID = "user_id"
SESSION_NICKNAME = "nickname"


def login_user(request, user):
    request.session.cycle_key()
    request.session[SESSION_USER_ID] = user["user_id"]
    request.session[SESSION_NICKNAME] = user["nickname"]


def logout_user(request):
    request.session.flush()


def current_user(request):
    user_id = request.session.get(SESSION_USER_ID)
    if not user_id:
        return None
    return {"user_id": user_id, "nickname": request.session.get(SESSION_NICKNAME, "")}


def nickname_required(view):
    """Redirect to the login screen unless a nickname is signed in."""

    @wraps(view)
    def wrapper(request, *args, **kwargs):
        user = current_user(request)
        if user is None:
            return redirect("login")
        request.stand_user = user
        return view(request, *args, **kwargs)

    return wrapper
