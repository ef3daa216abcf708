import html

import bleach
from rest_framework import serializers


def plain_text(value) -> str:
    """Strip tags from free text and return it unescaped, as it will be stored and looked up."""
    text = html.unescape(bleach.clean((value or '').strip(), tags=[], strip=True)).strip()
    if '<' in text or '>' in text:
        raise serializers.ValidationError('Markup is not allowed')
    return text
