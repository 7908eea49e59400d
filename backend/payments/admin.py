from django.contrib import admin

from .models import Invoice, PaymentNotification


@admin.register(Invoice)
class InvoiceAdmin(admin.ModelAdmin):
    list_display = ['invoice_number', 'order_number', 'amount', 'status', 'payment_method', 'paid_at', 'created_at']
    list_filter = ['status', 'payment_method']
    search_fields = ['invoice_number', 'order_number']


@admin.register(PaymentNotification)
class PaymentNotificationAdmin(admin.ModelAdmin):
    list_display = ['order_id', 'transaction_id', 'status', 'amount', 'is_simulated', 'is_verified', 'received_at']
    list_filter = ['status', 'is_simulated', 'is_verified']
    search_fields = ['order_id', 'transaction_id']
    readonly_fields = ['raw', 'received_at']
