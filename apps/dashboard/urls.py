from django.urls import path
from . import views

app_name = 'dashboard'

urlpatterns = [
    # Aggregations
    path('dashboard/stats', views.stats_api, name='stats'),
    path('dashboard/callbacks', views.callbacks_api, name='callbacks'),
    path('dashboard/goal', views.goal_api, name='goal'),
    path('dashboard/incomplete', views.incomplete_api, name='incomplete'),
    path('dashboard/performance', views.performance_api, name='performance'),
    path('dashboard/stale', views.stale_api, name='stale'),
    path('dashboard/timeline', views.timeline_api, name='timeline'),

    # Layout
    path('dashboard/layout', views.layout_api, name='layout'),
    path('dashboard/layout/reset', views.layout_reset_api, name='layout_reset'),
    path('dashboard/period', views.period_api, name='period'),
    path('dashboard/design', views.design_api, name='design'),

    # Widgets
    path('dashboard/widgets', views.widgets_api, name='widgets'),
    path('dashboard/widgets/<str:widget_id>', views.widget_detail_api, name='widget_detail'),
    path('dashboard/widgets/<str:widget_id>/color', views.widget_color_api, name='widget_color'),

    # Presets
    path('dashboard/presets', views.presets_api, name='presets'),
    path('dashboard/presets/<str:preset_id>', views.preset_detail_api, name='preset_detail'),
    path('dashboard/presets/<str:preset_id>/load', views.preset_load_api, name='preset_load'),
]
