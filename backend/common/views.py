"""
Service-level endpoints.
"""
from drf_spectacular.utils import extend_schema, OpenApiExample, OpenApiResponse
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import AllowAny
from rest_framework.response import Response


@extend_schema(
    tags=['Health'],
    summary='Liveness check',
    responses={
        200: OpenApiResponse(
            description='Service is up',
            examples=[OpenApiExample('Healthy', value={'ok': True})]
        )
    }
)
@api_view(['GET'])
@permission_classes([AllowAny])
def health(request):
    """Always answers {ok: true} while the process is serving requests."""
    return Response({'ok': True})
