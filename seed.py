from roomshare import create_app, db
from roomshare.models import User, Room, RoomStatus

app = create_app()

def get_or_create_user(username, email, role):
    user = User.query.filter_by(username=username).first()
    if user:
        return user
    user = User(username=username, email=email, role=role)
    user.set_password('password')
    db.session.add(user)
    db.session.flush()
    print(f"User {username} created ({username}/password, {role})")
    return user

with app.app_context():
    db.create_all()

    get_or_create_user('admin', 'admin@roomshare.local', User.ADMIN)
    owner = get_or_create_user('owner', 'owner@roomshare.local', User.OWNER)
    get_or_create_user('client', 'client@roomshare.local', User.CLIENT)

    # Create Rooms
    rooms_data = [
        {"title": "Salle Alpha", "city": "Paris", "capacity": 4, "rate_amount": 20, "rate_unit": "hour",
         "equipment": ["tv"], "status": RoomStatus.APPROVED},
        {"title": "Salle Beta", "city": "Lyon", "capacity": 10, "rate_amount": 150, "rate_unit": "day",
         "equipment": ["projector", "whiteboard"], "status": RoomStatus.APPROVED},
        {"title": "Auditorium", "city": "Paris", "capacity": 50, "rate_amount": 2000, "rate_unit": "week",
         "equipment": ["sound_system", "stage"], "status": RoomStatus.APPROVED},
        {"title": "Focus Room 1", "city": "Nantes", "capacity": 1, "rate_amount": 8, "rate_unit": "hour",
         "equipment": ["desk"], "status": RoomStatus.PENDING}
    ]

    for r_data in rooms_data:
        if not Room.query.filter_by(title=r_data['title']).first():
            room = Room(owner_id=owner.id, description=f"{r_data['title']} in {r_data['city']}", **r_data)
            db.session.add(room)
            print(f"Room {room.title} created.")

    db.session.commit()
    print("Database seeded successfully.")
