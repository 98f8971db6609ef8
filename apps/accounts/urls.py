from django.urls import path
from . import views

app_name = 'accounts'

urlpatterns = [
    # Authentication
    path('auth/login', views.login_view, name='login'),
    path('auth/logout', views.logout_view, name='logout'),
    path('auth/me', views.me_view, name='me'),

    # Users
    path('users', views.users_api, name='users'),
    path('users/<int:pk>/permissions', views.user_permissions_api, name='user_permissions'),
    path('users/<int:pk>/activity', views.user_activity_api, name='user_activity'),
    path('users/<int:pk>/memo', views.user_memo_api, name='user_memo'),

    # Teams / organization
    path('teams/<int:pk>/memo', views.team_memo_api, name='team_memo'),
    path('organization', views.organization_api, name='organization'),
]
