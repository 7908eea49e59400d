from decimal import Decimal

from django.db import models


class Invoice(models.Model):
    """Customer invoices awaiting online payment"""
    STATUS_CHOICES = [
        ('unpaid', 'Unpaid'),
        ('paid', 'Paid'),
        ('failed', 'Failed'),
        ('expired', 'Expired'),
        ('cancelled', 'Cancelled'),
    ]

    invoice_number = models.CharField(max_length=100, unique=True)
    order_number = models.CharField(max_length=100, blank=True)
    amount = models.DecimalField(max_digits=14, decimal_places=2, default=Decimal('0.00'))
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default='unpaid')
    payment_method = models.CharField(max_length=50, blank=True)
    paid_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.invoice_number

    class Meta:
        db_table = 'invoices'
        ordering = ['-created_at']


class PaymentNotification(models.Model):
    """Every payment webhook received, verified or not"""
    invoice = models.ForeignKey(Invoice, on_delete=models.SET_NULL, null=True, blank=True, related_name='notifications')
    transaction_id = models.CharField(max_length=100, blank=True)
    order_id = models.CharField(max_length=100, db_index=True)
    status = models.CharField(max_length=50, blank=True)
    amount = models.DecimalField(max_digits=14, decimal_places=2, null=True, blank=True)
    payment_type = models.CharField(max_length=50, blank=True)
    signature = models.CharField(max_length=255, blank=True)
    is_simulated = models.BooleanField(default=False)
    is_verified = models.BooleanField(default=False)
    raw = models.JSONField(default=dict, blank=True)
    received_at = models.DateTimeField(auto_now_add=True)

    def __str__(self):
        return f"{self.order_id} - {self.status}"

    class Meta:
        db_table = 'payment_notifications'
        ordering = ['-received_at']
