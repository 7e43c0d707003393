# reports/serializers.py

from rest_framework import serializers


class AsOfQuerySerializer(serializers.Serializer):
    as_of = serializers.DateField(required=False)


class DsoQuerySerializer(AsOfQuerySerializer):
    days = serializers.IntegerField(required=False, min_value=1, max_value=3650, default=90)


class StockValuationQuerySerializer(serializers.Serializer):
    include_inactive = serializers.BooleanField(required=False, default=False)
