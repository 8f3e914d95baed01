from django import template

from apps.transactions.utils import format_currency

register = template.Library()


@register.filter
def usd(value):
    """금액 -> "$1,234.56" """
    return format_currency(value)
