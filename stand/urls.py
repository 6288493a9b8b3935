from django.urls import path
from . import views

urlpatterns = [
    # Orders
    path('', views.orders_list, name='orders_list'),
    path('orders/snapshot/', views.orders_snapshot, name='orders_snapshot'),
    path('orders/create/', views.create_order, name='create_order'),
    path('orders/create/burger/', views.customize_burger, name='customize_burger'),
    path('orders/<str:order_id>/', views.order_detail, name='order_detail'),
    path('orders/<str:order_id>/items/', views.update_items, name='update_items'),
    path('orders/<str:order_id>/priority/', views.change_priority, name='change_priority'),
    path('orders/<str:order_id>/burger/', views.add_burger_to_order, name='add_burger_to_order'),
    path('orders/<str:order_id>/fries/', views.add_fries_to_order, name='add_fries_to_order'),
    path('orders/<str:order_id>/delete/', views.delete_order, name='delete_order'),

    # Comments
    path('orders/<str:order_id>/comments/', views.add_comment, name='add_comment'),
    path('orders/<str:order_id>/comments/<str:comment_id>/resolve/', views.resolve_comment, name='resolve_comment'),
    path('orders/<str:order_id>/comments/<str:comment_id>/delete/', views.delete_comment, name='delete_comment'),

    # Auth
    path('login/', views.login_view, name='login'),
    path('logout/', views.logout_view, name='logout'),

    # Settings
    path('settings/', views.settings_view, name='settings'),
    path('settings/nickname/', views.change_nickname, name='change_nickname'),
    path('settings/ingredients/add/', views.add_ingredient, name='add_ingredient'),
    path('settings/ingredients/delete/', views.delete_ingredient, name='delete_ingredient'),
    path('settings/recipes/add/', views.add_recipe, name='add_recipe'),
    path('settings/recipes/<str:recipe_id>/edit/', views.edit_recipe, name='edit_recipe'),
    path('settings/recipes/<str:recipe_id>/delete/', views.delete_recipe, name='delete_recipe'),
    path('settings/recipes/<str:recipe_id>/activate/', views.activate_recipe, name='activate_recipe'),
    path('settings/prices/', views.update_prices, name='update_prices'),
    path('settings/counter/', views.set_order_counter, name='set_order_counter'),

    # Gallery
    path('gallery/', views.album_list, name='album_list'),
    path('gallery/<str:album_id>/', views.album_detail, name='album_detail'),
    path('gallery/<str:album_id>/rename/', views.rename_album, name='rename_album'),
    path('gallery/<str:album_id>/delete/', views.delete_album, name='delete_album'),
    path('gallery/<str:album_id>/upload/', views.upload_photo, name='upload_photo'),
    path('photos/<str:photo_id>/', views.view_photo, name='view_photo'),
    path('photos/<str:photo_id>/delete/', views.delete_photo, name='delete_photo'),

    # Expenses
    path('expenses/', views.action_list, name='action_list'),
    path('expenses/<str:action_id>/', views.action_detail, name='action_detail'),
    path('expenses/<str:action_id>/rename/', views.rename_action, name='rename_action'),
    path('expenses/<str:action_id>/delete/', views.delete_action, name='delete_action'),
    path('expenses/<str:action_id>/items/', views.add_expense_item, name='add_expense_item'),
    path('expense-items/<str:item_id>/edit/', views.edit_expense_item, name='edit_expense_item'),
    path('expense-items/<str:item_id>/delete/', views.delete_expense_item, name='delete_expense_item'),

    # Stats
    path('stats/', views.stats_view, name='stats'),
]
