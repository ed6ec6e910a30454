"""
Company switcher API.

GET /v1/companies lists the companies the caller belongs to, with the
caller's role in each, most recently used first.
"""
import logging

from drf_spectacular.utils import extend_schema
from rest_framework import status
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from .serializers import UserCompanySerializer
from .services import CompanyService

logger = logging.getLogger(__name__)


class MyCompaniesView(APIView):
    """
    List the caller's companies.

    No company context is needed: this is what the client uses to pick the
    X-COMPANY-ID value for company-scoped requests.
    """

    permission_classes = [IsAuthenticated]

    @extend_schema(
        summary="List my companies",
        description="""
List every active company the authenticated user is a member of.

Each entry carries the user's role in that company. Entries are ordered by
the last request made in each company, so the first entry is the company
the user used most recently.
        """,
        responses={200: UserCompanySerializer(many=True)},
        tags=['Companies']
    )
    def get(self, request):
        memberships = CompanyService.get_user_companies(request.user)
        serializer = UserCompanySerializer(memberships, many=True)

        logger.debug(
            f"Listed {len(memberships)} companies for user {request.user.pk}",
            extra={'request_id': getattr(request, 'request_id', None)}
        )
        return Response(serializer.data, status=status.HTTP_200_OK)
