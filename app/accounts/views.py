"""
Identity lookup endpoint.

    GET /api/v1/inbox/profiles/{id}/   Display data for a profile
"""

from drf_spectacular.utils import OpenApiResponse, extend_schema
from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from accounts.serializers import IdentitySerializer
from accounts.services import ProfileDirectory


class ProfileIdentityView(APIView):
    """Resolve a profile id to its display name, avatar and verification flag."""

    permission_classes = [IsAuthenticated]

    @extend_schema(
        operation_id="get_profile_identity",
        summary="Resolve profile identity",
        tags=["Inbox - Profiles"],
        responses={
            200: IdentitySerializer,
            404: OpenApiResponse(description="Profile not found"),
        },
    )
    def get(self, request, pk):
        identity = ProfileDirectory.resolve(pk)
        if identity is None:
            return Response(
                {"error": "Profile not found", "error_code": "TARGET_NOT_FOUND"},
                status=status.HTTP_404_NOT_FOUND,
            )
        return Response(IdentitySerializer(identity).data)
