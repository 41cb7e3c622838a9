from locust import HttpUser, task, between
import random


class Shopper(HttpUser):
    wait_time = between(0.1, 0.5)

    def on_start(self):
        # Each simulated client signs up; the session cookie is kept by the client
        email = f"shopper_{random.randint(1, 1_000_000)}@example.com"
        r = self.client.post("/mutations/signup", json={"email": email, "password": "secret"})
        self.item_id = None
        if r.status_code == 200:
            item = self.client.post("/mutations/createItem", json={"title": "Load item", "price": 100})
            if item.status_code == 200:
                self.item_id = item.json()["id"]

    @task(3)
    def add_to_cart(self):
        if not self.item_id:
            return
        self.client.post("/mutations/addToCart", json={"id": self.item_id})

    @task(1)
    def checkout(self):
        if not self.item_id:
            return
        self.client.post("/mutations/createOrder", json={"token": "tok_visa"})
