from django.urls import path
from . import views

app_name = 'customers'

urlpatterns = [
    path('customers', views.customers_api, name='customers'),
    path('customers/duplicate-check', views.duplicate_check_api, name='duplicate_check'),
    path('customers/export', views.customer_export_view, name='customer_export'),
    path('customers/<int:pk>', views.customer_detail_api, name='customer_detail'),
    path('seed-sample-data', views.seed_sample_data_api, name='seed_sample_data'),
]
