from django.urls import path
from . import views

urlpatterns = [
    path('webhooks/payment/', views.payment_webhook, name='payment-webhook'),
    path('payments/simulate/', views.simulate_payment, name='payment-simulate'),
    path('payments/invoices/<str:invoice_number>/', views.invoice_status, name='invoice-status'),
    path('payments/notifications/', views.notification_list, name='payment-notifications'),
]
