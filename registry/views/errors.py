from django.http import JsonResponse


def not_found(request, exception=None):
    """JSON 404 for paths no route matches."""
    return JsonResponse(
        {'ok': False, 'error': {'code': 'not_found', 'message': 'Route not found'}},
        status=404,
    )
