# orders/serializers.py

from rest_framework import serializers

from orders.models import Order, OrderLineItem


class OrderLineItemSerializer(serializers.ModelSerializer):
    class Meta:
        model = OrderLineItem
        fields = [
            "id",
            "product_id",
            "variant_id",
            "title",
            "variant_title",
            "price",
            "quantity",
            "total_price",
            "position",
        ]
        read_only_fields = fields


class OrderSerializer(serializers.ModelSerializer):
    line_items = OrderLineItemSerializer(many=True, read_only=True)

    class Meta:
        model = Order
        fields = [
            "id",
            "order_number",
            "status",
            "financial_status",
            "payment_status",
            "payment_method",
            "currency",
            "customer_email",
            "customer_name",
            "customer_phone",
            "subtotal_price",
            "total_discount",
            "total_tax",
            "total_shipping",
            "total_price",
            "discount_code",
            "shipping_address",
            "billing_address",
            "note",
            "created_at",
            "line_items",
        ]
        read_only_fields = fields
