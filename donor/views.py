import logging

from django.http import JsonResponse
from django.views.decorators.http import require_GET

from blood import exceptions as errors
from blood.utils.payload import json_api
from .models import Donor
from .services.eligibility import describe_eligibility

logger = logging.getLogger(__name__)


@require_GET
@json_api
def donor_eligibility_view(request, pk):
    result = describe_eligibility(pk)
    logger.debug("Eligibility for %s: %s", pk, result)
    return JsonResponse(result.as_dict())


@require_GET
@json_api
def donor_by_user_view(request, user_id):
    donor = Donor.objects.select_related('user').filter(user_id=user_id).first()
    if donor is None:
        raise errors.NotFoundError('Donor profile not found.', code='DONOR_NOT_FOUND')
    return JsonResponse(donor.as_dict())
