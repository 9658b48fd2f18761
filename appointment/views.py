from django.http import JsonResponse
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_GET, require_http_methods, require_POST

from blood import exceptions as errors
from blood.utils.payload import json_api, optional_datetime, optional_int, read_json
from .models import Appointment
from .services import booking
from .services.camps import list_camps


@csrf_exempt
@require_POST
@json_api
def book_appointment_view(request):
    payload = read_json(request)
    appointment = booking.book_appointment(
        donor_id=optional_int(payload, 'donorId'),
        center_id=optional_int(payload, 'hospitalId'),
        time=optional_datetime(payload, 'time', 'date'),
        user_id=optional_int(payload, 'donorUserId'),
        donor_name=payload.get('donorName') or '',
        center_type=payload.get('centerType'),
        blood_type=payload.get('bloodType'),
        center_name=payload.get('centerName'),
    )
    return JsonResponse(appointment.as_dict(), status=201)


@require_GET
@json_api
def appointment_list_view(request):
    appointments = Appointment.objects.all()
    return JsonResponse([a.as_dict() for a in appointments], safe=False)


@require_GET
@json_api
def donor_appointments_view(request, donor_id):
    appointments = booking.appointments_for_donor(donor_id)
    return JsonResponse([a.as_dict() for a in appointments], safe=False)


@csrf_exempt
@require_http_methods(['PUT', 'POST'])
@json_api
def appointment_status_view(request, pk):
    payload = read_json(request)
    status = payload.get('status')
    if not status:
        raise errors.ValidationError('Status is required.', code='MISSING_STATUS')
    appointment = booking.update_appointment_status(pk, status)
    return JsonResponse(appointment.as_dict())


@csrf_exempt
@require_http_methods(['PUT', 'POST'])
@json_api
def appointment_cancel_view(request, pk):
    appointment = booking.cancel_appointment(pk)
    return JsonResponse(appointment.as_dict())


@require_GET
@json_api
def camp_list_view(request):
    return JsonResponse([camp.as_dict() for camp in list_camps()], safe=False)
