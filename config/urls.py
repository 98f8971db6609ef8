from django.contrib import admin
from django.urls import path, include
from django.conf import settings
from django.conf.urls.static import static

from apps.core.views import landing_view

# Main URL Configuration
# JSON APIs live under /api/, the public landing pages under /landing/

urlpatterns = [

    path('admin/', admin.site.urls),
    path('api/', include('apps.accounts.urls')),
    path('api/', include('apps.core.urls')),
    path('api/', include('apps.customers.urls')),
    path('api/', include('apps.dashboard.urls')),
    path('landing/<str:branch_slug>', landing_view, name='landing'),

]

if settings.DEBUG:
    # Media files (branding uploads)
    urlpatterns += static(settings.MEDIA_URL, document_root=settings.MEDIA_ROOT)

    # Static files (CSS, JS, images)
    urlpatterns += static(settings.STATIC_URL, document_root=settings.STATIC_ROOT)
