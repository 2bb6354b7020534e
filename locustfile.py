from locust import HttpUser, task, between
import random


class ShopperUser(HttpUser):
    wait_time = between(0.1, 0.5)

    def on_start(self):
        # Register a shopper for this simulated client
        email = f"shopper_{random.randint(1, 1_000_000)}@example.com"
        r = self.client.post(
            "/api/users/register",
            json={"email": email, "password": "secret1", "firstName": "Load", "lastName": "Test"},
        )
        if r.status_code == 201:
            self.headers = {"Authorization": f"Bearer {r.json()['data']['token']}"}
        else:
            self.headers = None

    @task(4)
    def browse_products(self):
        self.client.get("/api/products", params={"page": random.randint(1, 3), "pageSize": 20})

    @task(2)
    def browse_categories(self):
        self.client.get("/api/categories/home")

    @task(1)
    def check_session(self):
        if not getattr(self, "headers", None):
            return
        self.client.get("/api/auth/me", headers=self.headers)
