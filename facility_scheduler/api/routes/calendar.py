from flask import Blueprint, Response, request, jsonify, current_app
from facility_scheduler.api.providers import get_calendar_service
from facility_scheduler.api.routes.bookings import rejection_response, store_unavailable_response
from facility_scheduler.errors import Rejection, StoreUnavailable, ValidationError
from facility_scheduler.services.booking_service import parse_date, parse_filters
from facility_scheduler.services.calendar_service import to_ical

calendar_bp = Blueprint('calendar', __name__)

@calendar_bp.errorhandler(StoreUnavailable)
def handle_store_unavailable(e):
    current_app.logger.error(f"Booking store unavailable: {e}")
    return store_unavailable_response()

@calendar_bp.route('/events', methods=['GET'])
def get_events():
    try:
        filters = parse_filters(request.args)
    except ValidationError as e:
        return rejection_response(Rejection.from_error(e))

    events = get_calendar_service().events(**filters)
    return jsonify([e.to_dict() for e in events])

@calendar_bp.route('/<int:facility_id>.ics', methods=['GET'])
def get_ical_feed(facility_id):
    try:
        target_date = parse_date(request.args.get('date'), 'date')
    except ValidationError as e:
        return rejection_response(Rejection.from_error(e))

    events = get_calendar_service().events_for(facility_id, target_date)
    body = to_ical(events, current_app.config['TIMEZONE'])
    return Response(body, mimetype='text/calendar')
