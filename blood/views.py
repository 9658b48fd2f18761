from django.http import JsonResponse
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_GET, require_http_methods, require_POST

from . import models
from .services import allocation, lab
from .services.activity import recent_activity
from .services.stock_summary import available_units_by_type, stock_summary_text
from .utils.payload import json_api, optional_bool, optional_date, optional_int, read_json


@require_GET
@json_api
def inventory_list_view(request):
    bags = models.InventoryBag.objects.all()
    return JsonResponse([bag.as_dict() for bag in bags], safe=False)


@require_GET
@json_api
def inventory_pending_lab_view(request):
    bags = models.InventoryBag.objects.pending_lab().order_by('-collected_at', '-id')
    return JsonResponse([bag.as_dict() for bag in bags], safe=False)


@require_GET
@json_api
def inventory_summary_view(request):
    return JsonResponse({'byType': available_units_by_type(), 'text': stock_summary_text()})


@csrf_exempt
@require_POST
@json_api
def inventory_add_view(request):
    payload = read_json(request)
    quantity = optional_int(payload, 'quantity')
    bag = lab.add_screened_stock(
        payload.get('bloodType'),
        optional_date(payload, 'expiryDate'),
        quantity=1 if quantity is None else quantity,
    )
    return JsonResponse(bag.as_dict(), status=201)


@csrf_exempt
@require_http_methods(['PUT', 'POST'])
@json_api
def inventory_lab_result_view(request, pk):
    payload = read_json(request)
    bag = lab.record_lab_results(
        pk,
        hiv=optional_bool(payload, 'hiv'),
        hepatitis=optional_bool(payload, 'hep'),
        malaria=optional_bool(payload, 'malaria'),
        reason=payload.get('reason'),
    )
    return JsonResponse(bag.as_dict())


@csrf_exempt
@require_POST
@json_api
def emergency_request_create_view(request):
    payload = read_json(request)
    units = optional_int(payload, 'units')
    emergency = allocation.create_emergency_request(
        payload.get('bloodType') or '',
        1 if units is None else units,
        payload.get('hospital') or 'Unknown Hospital',
        payload.get('urgency'),
    )

    return JsonResponse({
        'success': True,
        'message': f'Emergency broadcast sent to all {emergency.blood_type} donors nearby!',
        'requestId': emergency.pk,
        'bloodType': emergency.blood_type,
        'units': emergency.units_requested,
        'hospital': emergency.hospital,
        'donorsNotified': emergency.donors_notified,
    })


@require_GET
@json_api
def emergency_requests_active_view(request):
    return JsonResponse([r.as_dict() for r in allocation.active_requests()], safe=False)


@require_GET
@json_api
def emergency_requests_all_view(request):
    return JsonResponse([r.as_dict() for r in allocation.all_requests()], safe=False)


@csrf_exempt
@require_http_methods(['PUT', 'POST'])
@json_api
def emergency_request_fulfill_view(request, pk):
    payload = read_json(request)
    units = optional_int(payload, 'units')
    updated = allocation.fulfill_emergency_request(pk, 0 if units is None else units)
    return JsonResponse({
        'success': True,
        'request': updated.as_dict(),
        'message': 'Emergency request updated.',
    })


@require_GET
@json_api
def activity_recent_view(request):
    limit = optional_int(request.GET, 'limit')
    return JsonResponse([entry.as_dict() for entry in recent_activity(limit)], safe=False)
