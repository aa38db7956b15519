from rentease import create_app
from rentease.models.store import Store
from rentease.utils.security import generate_hash


def ensure_user(store: Store, email: str, password: str, full_name: str):
    """
    Ensure an account with `email` exists in the store.
    - If exists: reset password hash and name (idempotent).
    - If not:   create a new account.
    The matching profile row is created or refreshed either way.
    """
    u = store.find_user(email)
    if u:
        u["password_hash"] = generate_hash(password)
        u["user_metadata"] = {"full_name": full_name}
        uid = u["id"]
    else:
        uid = store.create_user(email, generate_hash(password), full_name)
    store.upsert_profile(uid, {"full_name": full_name})
    return uid


def main():
    app = create_app()
    with app.app_context():
        store = Store.instance()

        # ---- Demo accounts: one host, one renter ----
        host_id = ensure_user(store, "host@rentease.test", "Host123", "Ana Horvat")
        ensure_user(store, "renter@rentease.test", "Renter123", "Marko Kovac")

        # ---- Demo hosted cars (create only if none exist) ----
        if not store.cars:
            store.insert("cars", {
                "owner_id": host_id, "make": "Volkswagen", "model": "Golf", "year": 2020,
                "seats": 5, "transmission": "manual", "fuel": "Diesel",
                "price_per_day": 45, "location": "Zagreb",
                "description": "Reliable hatchback, great for city trips.",
                "images": [], "image_url": None,
            })
            store.insert("cars", {
                "owner_id": host_id, "make": "Tesla", "model": "Model 3", "year": 2022,
                "seats": 5, "transmission": "automatic", "fuel": "Electric",
                "price_per_day": 110, "location": "Split",
                "description": "Long range, free charging cable included.",
                "images": [], "image_url": None,
            })
            store.insert("cars", {
                "owner_id": host_id, "make": "Renault", "model": "Trafic", "year": 2019,
                "seats": 8, "transmission": "manual", "fuel": "Diesel",
                "price_per_day": 85, "location": "Rijeka",
                "description": "Van for groups and luggage.",
                "images": [], "image_url": None,
            })

        store.save()

        print("Seed complete.")
        print("Host login:   host@rentease.test / Host123")
        print("Renter login: renter@rentease.test / Renter123")


if __name__ == "__main__":
    main()
