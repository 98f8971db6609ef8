from django.urls import path
from . import views


app_name = 'core'

urlpatterns = [
    path('branches', views.branches_api, name='branches'),
    path('settings/<str:key>', views.settings_api, name='settings'),
    path('upload/branding', views.branding_upload_api, name='branding_upload'),
]
