"""
Data factories and request helpers shared by the test modules.
"""

from rest_api.models import Branch, Credential, Restaurant, User
from shared.security.password import hash_password


TEST_PASSWORD = "testpass123"


def make_restaurant(db, name="Test Restaurant", whatsapp="56911112222", branch_whatsapp=None):
    """Restaurant with its main branch."""
    restaurant = Restaurant(
        name=name,
        address="Calle Falsa 123",
        phone="+56 2 1111 2222",
        whatsapp=whatsapp,
        email="contact@test.com",
    )
    db.add(restaurant)
    db.flush()
    db.add(
        Branch(
            restaurant_id=restaurant.id,
            name=f"{name} Centro",
            address="Calle Falsa 123",
            whatsapp=branch_whatsapp,
            is_main=True,
        )
    )
    db.commit()
    db.refresh(restaurant)
    return restaurant


def make_user(db, username, role, restaurant_id=None, password=TEST_PASSWORD, email=None):
    user = User(
        email=email or f"{username}@test.com",
        full_name=username.title(),
        role=role,
        restaurant_id=restaurant_id,
    )
    user.credential = Credential(username=username, password_hash=hash_password(password))
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def login(client, username, password=TEST_PASSWORD):
    """Log in and return Bearer headers. The cookie jar is cleared afterwards."""
    response = client.post(
        "/api/auth/login",
        json={"username": username, "password": password},
    )
    assert response.status_code == 200, response.text
    client.cookies.clear()
    return {"Authorization": f"Bearer {response.json()['access_token']}"}
