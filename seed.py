from facility_scheduler import create_app, db
from facility_scheduler.models import Facility

app = create_app()

with app.app_context():
    db.create_all()

    facilities_data = [
        {"name": "Swimming Pool A", "category": "Sports & Recreation", "location": "Building A - Floor 1", "capacity": 50, "status": "available"},
        {"name": "Gym & Fitness Center", "category": "Sports & Recreation", "location": "Building B - Floor 2", "capacity": 80, "status": "occupied"},
        {"name": "Meeting Room 101", "category": "Meeting & Events", "location": "Building A - Floor 1", "capacity": 12, "status": "available"},
        {"name": "Tennis Court 1", "category": "Sports & Recreation", "location": "Outdoor Area", "capacity": 4, "status": "maintenance"},
        {"name": "Spa & Sauna", "category": "Wellness", "location": "Building C - Floor 3", "capacity": 15, "status": "available"},
        {"name": "Rooftop Garden", "category": "Recreation", "location": "Building A - Rooftop", "capacity": 40, "status": "closed"},
    ]

    for f_data in facilities_data:
        if not Facility.query.filter_by(name=f_data['name']).first():
            facility = Facility(**f_data)
            db.session.add(facility)
            print(f"Facility {facility.name} created.")

    db.session.commit()
    print("Database seeded successfully.")
