from rest_framework import serializers

from .models import Invoice, PaymentNotification
from .simulator import PAYMENT_METHOD_IDS


class InvoiceSerializer(serializers.ModelSerializer):
    class Meta:
        model = Invoice
        fields = ['id', 'invoice_number', 'order_number', 'amount', 'status', 'payment_method',
                  'paid_at', 'created_at', 'updated_at']
        read_only_fields = ['id', 'created_at', 'updated_at']


class PaymentNotificationSerializer(serializers.ModelSerializer):
    invoice_number = serializers.CharField(source='invoice.invoice_number', read_only=True, default=None)

    class Meta:
        model = PaymentNotification
        fields = ['id', 'invoice', 'invoice_number', 'transaction_id', 'order_id', 'status', 'amount',
                  'payment_type', 'is_simulated', 'is_verified', 'received_at']
        read_only_fields = fields


class SimulatePaymentSerializer(serializers.Serializer):
    invoice_number = serializers.CharField(max_length=100)
    method = serializers.ChoiceField(choices=PAYMENT_METHOD_IDS)
