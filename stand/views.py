import logging
import uuid
from contextlib import contextmanager
from functools import wraps

from botocore.exceptions import BotoCoreError, ClientError
from django.contrib import messages
from django.http import JsonResponse
from django.shortcuts import redirect, render
from django.urls import reverse
from django.views.decorators.http import require_POST

from . import domain
from .auth import current_user, login_user, logout_user, nickname_required, SESSION_NICKNAME
from .exceptions import NotFound, StandError
from .forms import (
    CommentForm,
    DraftForm,
    ExpenseItemForm,
    IngredientForm,
    ItemSelectionForm,
    NameForm,
    NicknameForm,
    OrderCounterForm,
    PhotoUploadForm,
    PricesForm,
    PriorityForm,
    RecipeForm,
)
from .store import comments, expenses, gallery, orders, users
from .store import settings as stand_settings

logger = logging.getLogger(__name__)

DRAFT_KEY = "draft_order"
EDITOR_KEY = "burger_editor"


# error boundary shared by every user action
@contextmanager
def action_guard(request, failure_message):
    """
    Turn store failures into a transient notice. Stand errors carry their
    own message; AWS errors are logged and replaced by failure_message.
    """
    try:
        yield
    except StandError as exc:
        messages.error(request, str(exc))
    except (ClientError, BotoCoreError):
        logger.exception(failure_message)
        messages.error(request, failure_message)


def _first_error(form):
    for errors in form.errors.values():
        return errors[0]
    return "Invalid input."


def _new_item_id():
    return f"item-{uuid.uuid4().hex}"


def _decorate_items(items):
    for item in items:
        item["labels"] = domain.format_customizations(item)
    return items


def _decorate_order(order, prices=None, open_comments=None):
    """Attach the display-only fields used by order cards."""
    items = _decorate_items(order.get("items", []))
    order["age"] = domain.time_ago(order.get("created_at"))
    order["burger_count"] = sum(1 for i in items if i["type"] == domain.BURGER)
    order["fries_count"] = sum(1 for i in items if i["type"] == domain.FRIES)
    order["all_paid"] = domain.all_paid(items)
    order["all_delivered"] = domain.all_delivered(items)
    if open_comments is not None:
        order["open_comments"] = open_comments.get(order["order_id"], 0)
    if prices is not None:
        order["total"] = domain.order_total(items, prices)
    return order


# -----------------------------
# login
# -----------------------------
def login_view(request):
    if current_user(request):
        return redirect("orders_list")

    form = NicknameForm(request.POST or None)
    if request.method == "POST" and form.is_valid():
        with action_guard(request, "Login failed, try again."):
            user = users.create_user(form.cleaned_data["nickname"])
            login_user(request, user)
            return redirect("orders_list")

    return render(request, "login.html", {"form": form})


@require_POST
def logout_view(request):
    logout_user(request)
    return redirect("login")


# -----------------------------
# order list
# -----------------------------
def _filtered_orders(request):
    status = domain.parse_filter(request.GET.get("status"))
    payment = domain.parse_filter(request.GET.get("payment"))
    all_orders, open_comments = [], {}
    with action_guard(request, "Could not load orders."):
        all_orders = orders.list_orders()
        open_comments = comments.unresolved_counts()
    return domain.filter_orders(all_orders, status, payment), open_comments, status, payment


@nickname_required
def orders_list(request):
    """
    Orders filtered by the two three-state filters, plus the number of
    burgers and fries still waiting to be handed over.
    """
    visible, open_comments, status, payment = _filtered_orders(request)
    for order in visible:
        _decorate_order(order, open_comments=open_comments)

    return render(request, "orders_list.html", {
        "orders": visible,
        "queue": domain.queue_stats(visible),
        "status": status,
        "payment": payment,
        "status_label": domain.filter_label("status", status),
        "payment_label": domain.filter_label("payment", payment),
        "next_status": domain.cycle_filter(status),
        "next_payment": domain.cycle_filter(payment),
    })


@nickname_required
def orders_snapshot(request):
    """Current filtered list as JSON; the list page polls it to stay live."""
    visible, open_comments, status, payment = _filtered_orders(request)
    return JsonResponse({
        "orders": [
            {
                "order_id": o["order_id"],
                "order_number": o.get("order_number"),
                "priority": o.get("priority"),
                "status": o.get("status"),
                "open_comments": open_comments.get(o["order_id"], 0),
                "items": [
                    {"item_id": i["item_id"], "is_paid": i.get("is_paid"), "is_delivered": i.get("is_delivered")}
                    for i in o.get("items", [])
                ],
            }
            for o in visible
        ],
        "queue": domain.queue_stats(visible),
    })


# -----------------------------
# order creation (draft kept in the session)
# -----------------------------
def _load_draft(request):
    return request.session.get(DRAFT_KEY) or {
        "items": [],
        "priority": 1,
        "burger": domain.empty_customizations(),
    }


def _save_draft(request, draft):
    request.session[DRAFT_KEY] = draft


@nickname_required
def create_order(request):
    draft = _load_draft(request)

    if request.method == "POST":
        form = DraftForm(request.POST, items=draft["items"])
        if not form.is_valid():
            messages.error(request, _first_error(form))
            return redirect("create_order")

        action = form.cleaned_data["action"]
        if action == "add_burger":
            draft["items"].append(domain.new_item(_new_item_id(), domain.BURGER, draft["burger"]))
            if form.cleaned_data["include_fries"]:
                draft["items"].append(domain.new_item(_new_item_id(), domain.FRIES))
            draft["burger"] = domain.empty_customizations()
        elif action == "add_fries":
            draft["items"].append(domain.new_item(_new_item_id(), domain.FRIES))
        elif action == "remove_selected":
            draft["items"] = domain.remove_items(draft["items"], form.cleaned_data["selected"])
        elif action == "priority_up":
            draft["priority"] += 1
        elif action == "priority_down":
            draft["priority"] = max(1, draft["priority"] - 1)
        elif action == "discard":
            request.session.pop(DRAFT_KEY, None)
            return redirect("orders_list")
        elif action == "submit":
            if not draft["items"]:
                messages.error(request, "Add at least one item to the order.")
                return redirect("create_order")
            user = request.stand_user
            with action_guard(request, "Could not create the order."):
                orders.create_order(
                    user["user_id"],
                    draft["items"],
                    priority=draft["priority"],
                    initial_comment=form.cleaned_data["comment"],
                    author_nickname=user["nickname"],
                )
                request.session.pop(DRAFT_KEY, None)
                messages.success(request, "Order created.")
                return redirect("orders_list")
            return redirect("create_order")

        _save_draft(request, draft)
        return redirect("create_order")

    next_number = None
    with action_guard(request, "Could not load the order counter."):
        next_number = orders.get_order_counter() + 1

    return render(request, "create_order.html", {
        "draft": draft,
        "items": _decorate_items([dict(i) for i in draft["items"]]),
        "burger_labels": domain.format_customizations({"type": domain.BURGER, "customizations": draft["burger"]}),
        "next_number": next_number,
        "form": DraftForm(items=draft["items"]),
    })


def _burger_editor(request, editor_id, initial, on_confirm, back_url):
    """
    Tri-state ingredient editor. States live in the session between
    clicks; each click cycles one ingredient 1x -> 0x -> 2x -> 1x.
    """
    editor = request.session.get(EDITOR_KEY)
    if request.method == "GET" or not editor or editor.get("id") != editor_id:
        ingredients = []
        with action_guard(request, "Could not load the active recipe."):
            ingredients = stand_settings.get_active_ingredients()
        editor = {"id": editor_id, "states": domain.ingredient_states(ingredients, initial)}

    states = editor["states"]
    if request.method == "POST":
        if "cycle" in request.POST:
            ingredient = request.POST["cycle"]
            if ingredient in states:
                states[ingredient] = domain.cycle_ingredient(states[ingredient])
        elif "confirm" in request.POST:
            request.session.pop(EDITOR_KEY, None)
            return on_confirm(domain.customizations_from_states(states))
        else:
            request.session.pop(EDITOR_KEY, None)
            return redirect(back_url)

    request.session[EDITOR_KEY] = editor
    return render(request, "burger_editor.html", {
        "states": [(ing, state) for ing, state in states.items()],
        "back_url": back_url,
    })


@nickname_required
def customize_burger(request):
    draft = _load_draft(request)

    def confirm(customizations):
        draft["burger"] = customizations
        _save_draft(request, draft)
        return redirect("create_order")

    return _burger_editor(request, "draft", draft["burger"], confirm, reverse("create_order"))


# -----------------------------
# order detail
# -----------------------------
@nickname_required
def order_detail(request, order_id):
    try:
        order = orders.get_order(order_id)
        order_comments = comments.list_comments(order_id)
        prices = stand_settings.get_prices()
    except NotFound as exc:
        messages.error(request, str(exc))
        return redirect("orders_list")
    except (ClientError, BotoCoreError):
        logger.exception("Could not load order %s", order_id)
        messages.error(request, "Could not load the order.")
        return redirect("orders_list")

    _decorate_order(order, prices)
    for comment in order_comments:
        comment["age"] = domain.time_ago(comment.get("created_at"))

    return render(request, "order_detail.html", {
        "order": order,
        "items": order["items"],
        "comments": order_comments,
        "prices": prices,
        "comment_form": CommentForm(),
    })


@nickname_required
@require_POST
def update_items(request, order_id):
    """Toggle paid / delivered, complete everything or drop selected items."""
    with action_guard(request, "Could not update the order."):
        order = orders.get_order(order_id)
        form = ItemSelectionForm(request.POST, items=order["items"])
        if not form.is_valid():
            messages.error(request, _first_error(form))
            return redirect("order_detail", order_id=order_id)

        operation = form.cleaned_data["operation"]
        selected = form.cleaned_data["selected"]
        if operation == "paid":
            items = domain.toggle_items(order["items"], selected, "is_paid")
        elif operation == "delivered":
            items = domain.toggle_items(order["items"], selected, "is_delivered")
        elif operation == "complete":
            items = domain.complete_items(order["items"])
        else:
            items = domain.remove_items(order["items"], selected)

        updated = orders.update_order_items(order_id, items)
        if updated["status"] == domain.COMPLETED and order["status"] != domain.COMPLETED:
            messages.success(request, f"Order #{order['order_number']} completed.")

    return redirect("order_detail", order_id=order_id)


@nickname_required
@require_POST
def change_priority(request, order_id):
    form = PriorityForm(request.POST)
    if not form.is_valid():
        messages.error(request, _first_error(form))
        return redirect("order_detail", order_id=order_id)

    with action_guard(request, "Could not change the priority."):
        order = orders.get_order(order_id)
        orders.update_order_priority(order_id, max(1, order["priority"] + form.cleaned_data["delta"]))
    return redirect("order_detail", order_id=order_id)


@nickname_required
@require_POST
def add_fries_to_order(request, order_id):
    with action_guard(request, "Could not add fries."):
        order = orders.get_order(order_id)
        orders.update_order_items(order_id, order["items"] + [domain.new_item(_new_item_id(), domain.FRIES)])
    return redirect("order_detail", order_id=order_id)


@nickname_required
def add_burger_to_order(request, order_id):
    def confirm(customizations):
        with action_guard(request, "Could not add the burger."):
            order = orders.get_order(order_id)
            burger = domain.new_item(_new_item_id(), domain.BURGER, customizations)
            orders.update_order_items(order_id, order["items"] + [burger])
        return redirect("order_detail", order_id=order_id)

    back_url = reverse("order_detail", args=[order_id])
    return _burger_editor(request, f"order:{order_id}", None, confirm, back_url)


@nickname_required
@require_POST
def delete_order(request, order_id):
    with action_guard(request, "Could not delete the order."):
        orders.delete_order(order_id)
        messages.success(request, "Order deleted.")
    return redirect("orders_list")


# comments
@nickname_required
@require_POST
def add_comment(request, order_id):
    form = CommentForm(request.POST)
    if not form.is_valid():
        messages.error(request, _first_error(form))
        return redirect("order_detail", order_id=order_id)

    user = request.stand_user
    with action_guard(request, "Could not add the comment."):
        comments.add_comment(order_id, form.cleaned_data["text"], user["user_id"], user["nickname"])
    return redirect("order_detail", order_id=order_id)


@nickname_required
@require_POST
def resolve_comment(request, order_id, comment_id):
    with action_guard(request, "Could not resolve the comment."):
        comments.resolve_comment(order_id, comment_id)
    return redirect("order_detail", order_id=order_id)


@nickname_required
@require_POST
def delete_comment(request, order_id, comment_id):
    with action_guard(request, "Could not delete the comment."):
        comments.delete_comment(order_id, comment_id, request.stand_user["user_id"])
    return redirect("order_detail", order_id=order_id)


# -----------------------------
# settings
# -----------------------------
@nickname_required
def settings_view(request):
    ingredients, recipes, active, prices, counter = [], [], None, dict(domain.DEFAULT_PRICES), 0
    with action_guard(request, "Could not load settings."):
        ingredients = stand_settings.get_ingredients()
        recipes = stand_settings.get_recipes()
        active = stand_settings.get_active_recipe()
        prices = stand_settings.get_prices()
        counter = orders.get_order_counter()

    return render(request, "settings.html", {
        "nickname_form": NicknameForm(initial={"nickname": request.stand_user["nickname"]}),
        "ingredient_form": IngredientForm(),
        "ingredients": ingredients,
        "recipes": recipes,
        "active_recipe": active,
        "recipe_form": RecipeForm(initial={"ingredients": ", ".join(ingredients)}),
        "prices_form": PricesForm(initial=prices),
        "counter_form": OrderCounterForm(initial={"current_number": counter}),
    })


def _settings_post(form_class, failure_message):
    """
    POST-only settings action: validate form_class, run the store call
    inside the error boundary and go back to the settings screen.
    """
    def decorator(handler):
        @wraps(handler)
        def view(request, *args, **kwargs):
            form = form_class(request.POST) if form_class else None
            if form is not None and not form.is_valid():
                messages.error(request, _first_error(form))
                return redirect("settings")
            with action_guard(request, failure_message):
                handler(request, form, *args, **kwargs)
            return redirect("settings")
        return nickname_required(require_POST(view))
    return decorator


@_settings_post(NicknameForm, "Could not change the nickname.")
def change_nickname(request, form):
    nickname = form.cleaned_data["nickname"]
    users.update_nickname(request.stand_user["user_id"], nickname)
    request.session[SESSION_NICKNAME] = nickname
    messages.success(request, "Nickname changed.")


@_settings_post(IngredientForm, "Could not add the ingredient.")
def add_ingredient(request, form):
    stand_settings.add_ingredient(form.cleaned_data["ingredient"])


@_settings_post(IngredientForm, "Could not delete the ingredient.")
def delete_ingredient(request, form):
    stand_settings.delete_ingredient(form.cleaned_data["ingredient"])


@_settings_post(RecipeForm, "Could not create the recipe.")
def add_recipe(request, form):
    stand_settings.create_recipe(form.cleaned_data["name"], form.cleaned_data["ingredients"])
    messages.success(request, "Recipe created.")


@_settings_post(None, "Could not delete the recipe.")
def delete_recipe(request, form, recipe_id):
    stand_settings.delete_recipe(recipe_id)


@_settings_post(None, "Could not activate the recipe.")
def activate_recipe(request, form, recipe_id):
    stand_settings.set_active_recipe(recipe_id)
    messages.success(request, "Active recipe changed.")


@_settings_post(PricesForm, "Could not save prices.")
def update_prices(request, form):
    stand_settings.update_prices(form.cleaned_data["burger_price"], form.cleaned_data["fries_price"])
    messages.success(request, "Prices saved.")


@_settings_post(OrderCounterForm, "Could not set the order counter.")
def set_order_counter(request, form):
    orders.set_order_counter(form.cleaned_data["current_number"])
    messages.success(request, "Order counter saved.")


@nickname_required
def edit_recipe(request, recipe_id):
    recipe = None
    with action_guard(request, "Could not load the recipe."):
        recipe = next((r for r in stand_settings.get_recipes() if r["id"] == recipe_id), None)
    if recipe is None:
        messages.error(request, "Recipe not found.")
        return redirect("settings")

    if request.method == "POST":
        form = RecipeForm(request.POST)
        if form.is_valid():
            with action_guard(request, "Could not save the recipe."):
                stand_settings.update_recipe(recipe_id, form.cleaned_data["name"], form.cleaned_data["ingredients"])
                messages.success(request, "Recipe saved.")
            return redirect("settings")
    else:
        form = RecipeForm(initial={
            "name": recipe["name"],
            "ingredients": ", ".join(recipe["ingredients"]),
        })

    return render(request, "edit_recipe.html", {"form": form, "recipe": recipe})


# -----------------------------
# gallery
# -----------------------------
@nickname_required
def album_list(request):
    form = NameForm(request.POST or None)
    if request.method == "POST":
        if form.is_valid():
            with action_guard(request, "Could not create the album."):
                album_id = gallery.create_album(form.cleaned_data["name"], request.stand_user["user_id"])
                return redirect("album_detail", album_id=album_id)
        else:
            messages.error(request, _first_error(form))
        return redirect("album_list")

    albums = []
    with action_guard(request, "Could not load albums."):
        albums = gallery.list_albums()
    return render(request, "gallery.html", {"albums": albums, "form": NameForm()})


@nickname_required
def album_detail(request, album_id):
    try:
        album = gallery.get_album(album_id)
        photos = gallery.list_photos(album_id)
        for photo in photos:
            photo["thumbnail_link"] = gallery.photo_url(photo["thumbnail_url"])
    except NotFound as exc:
        messages.error(request, str(exc))
        return redirect("album_list")
    except (ClientError, BotoCoreError):
        logger.exception("Could not load album %s", album_id)
        messages.error(request, "Could not load the album.")
        return redirect("album_list")

    return render(request, "album_detail.html", {
        "album": album,
        "photos": photos,
        "upload_form": PhotoUploadForm(),
        "rename_form": NameForm(initial={"name": album["name"]}),
    })


@nickname_required
@require_POST
def rename_album(request, album_id):
    form = NameForm(request.POST)
    if form.is_valid():
        with action_guard(request, "Could not rename the album."):
            gallery.rename_album(album_id, form.cleaned_data["name"])
    else:
        messages.error(request, _first_error(form))
    return redirect("album_detail", album_id=album_id)


@nickname_required
@require_POST
def delete_album(request, album_id):
    with action_guard(request, "Could not delete the album."):
        gallery.delete_album(album_id)
        messages.success(request, "Album deleted.")
    return redirect("album_list")


@nickname_required
@require_POST
def upload_photo(request, album_id):
    form = PhotoUploadForm(request.POST, request.FILES)
    if form.is_valid():
        with action_guard(request, "Could not upload the photo."):
            gallery.add_photo(album_id, form.cleaned_data["image"], request.stand_user["user_id"])
            messages.success(request, "Photo uploaded.")
    else:
        messages.error(request, _first_error(form))
    return redirect("album_detail", album_id=album_id)


@nickname_required
def view_photo(request, photo_id):
    """
    Redirects to a temporary (presigned) S3 link of the full photo.
    """
    with action_guard(request, "Could not open the photo."):
        photo = gallery.get_photo(photo_id)
        return redirect(gallery.photo_url(photo["url"]))
    return redirect("album_list")


@nickname_required
@require_POST
def delete_photo(request, photo_id):
    album_id = request.POST.get("album_id")
    with action_guard(request, "Could not delete the photo."):
        gallery.delete_photo(photo_id)
    if album_id:
        return redirect("album_detail", album_id=album_id)
    return redirect("album_list")


# -----------------------------
# expenses
# -----------------------------
@nickname_required
def action_list(request):
    form = NameForm(request.POST or None)
    if request.method == "POST":
        if form.is_valid():
            with action_guard(request, "Could not create the action."):
                action_id = expenses.create_action(form.cleaned_data["name"], request.stand_user["user_id"])
                return redirect("action_detail", action_id=action_id)
        else:
            messages.error(request, _first_error(form))
        return redirect("action_list")

    actions = []
    with action_guard(request, "Could not load expenses."):
        actions = expenses.list_actions()
    return render(request, "expenses.html", {
        "actions": actions,
        "grand_total": sum(a.get("total_amount", 0) for a in actions),
        "form": NameForm(),
    })


def _photo_choices(request):
    photos = []
    with action_guard(request, "Could not load gallery photos."):
        photos = gallery.list_all_photos()
    return photos


@nickname_required
def action_detail(request, action_id):
    try:
        action = expenses.get_action(action_id)
        items = expenses.list_items(action_id)
    except NotFound as exc:
        messages.error(request, str(exc))
        return redirect("action_list")
    except (ClientError, BotoCoreError):
        logger.exception("Could not load expense action %s", action_id)
        messages.error(request, "Could not load the expense action.")
        return redirect("action_list")

    return render(request, "expense_action.html", {
        "action": action,
        "items": items,
        "item_form": ExpenseItemForm(photos=_photo_choices(request)),
        "rename_form": NameForm(initial={"name": action["name"]}),
    })


@nickname_required
@require_POST
def rename_action(request, action_id):
    form = NameForm(request.POST)
    if form.is_valid():
        with action_guard(request, "Could not rename the action."):
            expenses.rename_action(action_id, form.cleaned_data["name"])
    else:
        messages.error(request, _first_error(form))
    return redirect("action_detail", action_id=action_id)


@nickname_required
@require_POST
def delete_action(request, action_id):
    with action_guard(request, "Could not delete the action."):
        expenses.delete_action(action_id)
        messages.success(request, "Expense action deleted.")
    return redirect("action_list")


@nickname_required
@require_POST
def add_expense_item(request, action_id):
    form = ExpenseItemForm(request.POST, photos=_photo_choices(request))
    if form.is_valid():
        with action_guard(request, "Could not add the expense."):
            expenses.add_item(
                action_id,
                form.cleaned_data["description"],
                form.cleaned_data["amount"],
                request.stand_user["user_id"],
                photo_id=form.cleaned_data["photo_id"] or None,
            )
    else:
        messages.error(request, _first_error(form))
    return redirect("action_detail", action_id=action_id)


@nickname_required
def edit_expense_item(request, item_id):
    item = None
    with action_guard(request, "Could not load the expense."):
        item = expenses.get_item(item_id)
    if item is None:
        return redirect("action_list")

    photos = _photo_choices(request)
    if request.method == "POST":
        form = ExpenseItemForm(request.POST, photos=photos)
        if form.is_valid():
            with action_guard(request, "Could not save the expense."):
                expenses.update_item(
                    item_id,
                    description=form.cleaned_data["description"],
                    amount=form.cleaned_data["amount"],
                    photo_id=form.cleaned_data["photo_id"],
                )
            return redirect("action_detail", action_id=item["action_id"])
    else:
        form = ExpenseItemForm(photos=photos, initial={
            "description": item["description"],
            "amount": item["amount"],
            "photo_id": item.get("photo_id") or "",
        })

    return render(request, "edit_expense_item.html", {"form": form, "item": item})


@nickname_required
@require_POST
def delete_expense_item(request, item_id):
    action_id = request.POST.get("action_id")
    with action_guard(request, "Could not delete the expense."):
        expenses.delete_item(item_id)
    if action_id:
        return redirect("action_detail", action_id=action_id)
    return redirect("action_list")


# -----------------------------
# stats
# -----------------------------
@nickname_required
def stats_view(request):
    all_orders, prices = [], dict(domain.DEFAULT_PRICES)
    with action_guard(request, "Could not load statistics."):
        all_orders = orders.list_orders()
        prices = stand_settings.get_prices()

    return render(request, "stats.html", {
        "stats": domain.sales_stats(all_orders, prices),
        "prices": prices,
        "order_count": len(all_orders),
        "completed_count": sum(1 for o in all_orders if o.get("status") == domain.COMPLETED),
    })
