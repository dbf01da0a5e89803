"""
Page/limit pagination and whitelisted sorting shared by every list endpoint.

Query parameters: ``page`` (>= 1), ``limit`` (1-100), ``sortBy`` and
``sortOrder`` (``asc`` | ``desc``). Paged responses look like::

    {"data": [...], "meta": {"total": 42, "page": 1, "limit": 10, "totalPages": 5}}
"""
import math

from rest_framework import serializers
from rest_framework.exceptions import ValidationError
from rest_framework.filters import BaseFilterBackend
from rest_framework.pagination import PageNumberPagination
from rest_framework.response import Response


class PageQuerySerializer(serializers.Serializer):
    page = serializers.IntegerField(min_value=1, default=1)
    limit = serializers.IntegerField(min_value=1, max_value=100, default=10)


class MetaPagination(PageNumberPagination):
    page_size = 10
    page_query_param = 'page'
    page_size_query_param = 'limit'
    max_page_size = 100

    def paginate_queryset(self, queryset, request, view=None):
        params = PageQuerySerializer(data=request.query_params)
        if not params.is_valid():
            raise ValidationError(params.errors)

        self.request = request
        self.page_number = params.validated_data['page']
        self.limit = params.validated_data['limit']
        self.total = queryset.count()

        offset = (self.page_number - 1) * self.limit
        return list(queryset[offset:offset + self.limit])

    def get_paginated_response(self, data):
        return Response({
            'data': data,
            'meta': {
                'total': self.total,
                'page': self.page_number,
                'limit': self.limit,
                'totalPages': math.ceil(self.total / self.limit) if self.total else 0,
            },
        })

    def get_paginated_response_schema(self, schema):
        return {
            'type': 'object',
            'required': ['data', 'meta'],
            'properties': {
                'data': schema,
                'meta': {
                    'type': 'object',
                    'properties': {
                        'total': {'type': 'integer', 'example': 42},
                        'page': {'type': 'integer', 'example': 1},
                        'limit': {'type': 'integer', 'example': 10},
                        'totalPages': {'type': 'integer', 'example': 5},
                    },
                },
            },
        }


class SortFilter(BaseFilterBackend):
    """
    Orders list results by ``sortBy``/``sortOrder``.

    Views opt in with ``sort_fields``, a mapping of public (camelCase) names
    to ORM fields, and may set ``default_sort``.
    """

    def filter_queryset(self, request, queryset, view):
        sort_fields = getattr(view, 'sort_fields', None)
        if not sort_fields:
            return queryset

        sort_by = request.query_params.get('sortBy') or getattr(view, 'default_sort', 'createdAt')
        sort_order = request.query_params.get('sortOrder') or 'desc'

        errors = {}
        if sort_by not in sort_fields:
            errors['sortBy'] = [f"Must be one of: {', '.join(sort_fields)}."]
        if sort_order not in ('asc', 'desc'):
            errors['sortOrder'] = ["Must be 'asc' or 'desc'."]
        if errors:
            raise ValidationError(errors)

        prefix = '' if sort_order == 'asc' else '-'
        return queryset.order_by(f'{prefix}{sort_fields[sort_by]}', f'{prefix}pk')

    def get_schema_operation_parameters(self, view):
        sort_fields = getattr(view, 'sort_fields', None)
        if not sort_fields:
            return []
        return [
            {
                'name': 'sortBy',
                'required': False,
                'in': 'query',
                'schema': {'type': 'string', 'enum': list(sort_fields)},
            },
            {
                'name': 'sortOrder',
                'required': False,
                'in': 'query',
                'schema': {'type': 'string', 'enum': ['asc', 'desc']},
            },
        ]
