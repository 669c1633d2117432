"""Packing load test scenarios.

A packing operation is partially fulfilled, then its fulfilled units are
spread over packages that are measured, closed, labeled and shipped. A
second journey has two packages compete for the same units so the
conflict path is exercised under load.
"""

import random

from locust import HttpUser, SequentialTaskSet, between, task

from loadtests.data_generators import label_data, operation_data, package_measures, tenant_id, user_id
from loadtests.helpers.response import extract_error_detail
from loadtests.helpers.state import PackingState


class _PackingSetup(SequentialTaskSet):
    """Creates a packing operation and fulfills half of every item."""

    def on_start(self):
        self.state = PackingState()
        self.fulfilled: dict[str, int] = {}

    def _setup_operation(self):
        payload = operation_data(operation_type="packing", num_items=random.randint(1, 3))
        for item in payload["items"]:
            item["demanded_quantity"] = random.randint(4, 20)
        with self.client.post(
            "/operations",
            json=payload,
            catch_response=True,
            name="POST /operations",
        ) as resp:
            if resp.status_code != 201:
                resp.failure(f"Create operation failed: {resp.status_code} — {extract_error_detail(resp)}")
                self.interrupt()
                return
            self.state.operation_id = resp.json()["operation_id"]

        items = self.client.get(f"/operations/{self.state.operation_id}", name="GET /operations/{id}").json()["items"]
        for item in items:
            quantity = item["demanded_quantity"]
            self.client.put(
                f"/operations/{self.state.operation_id}/items/{item['id']}/process",
                json={"quantity": quantity},
                name="PUT /operations/{id}/items/{item_id}/process",
            )
            self.state.item_ids.append(item["id"])
            self.fulfilled[item["id"]] = quantity

    def _open_package(self) -> str | None:
        with self.client.post(
            "/packages",
            json={"operation_id": self.state.operation_id},
            catch_response=True,
            name="POST /packages",
        ) as resp:
            if resp.status_code != 201:
                resp.failure(f"Create package failed: {resp.status_code} — {extract_error_detail(resp)}")
                return None
            package_id = resp.json()["package_id"]
            self.state.package_ids.append(package_id)
            return package_id


class PackageShippingJourney(_PackingSetup):
    """Setup -> Open package -> Pack everything -> Measure -> Close -> Label -> Ship."""

    @task
    def setup(self):
        self._setup_operation()

    @task
    def pack(self):
        package_id = self._open_package()
        if package_id is None:
            self.interrupt()
            return
        for item_id, quantity in self.fulfilled.items():
            with self.client.put(
                f"/packages/{package_id}/items",
                json={"operation_item_id": item_id, "quantity": quantity},
                catch_response=True,
                name="PUT /packages/{id}/items",
            ) as resp:
                if resp.status_code != 201:
                    resp.failure(f"Pack failed: {resp.status_code} — {extract_error_detail(resp)}")
                    self.interrupt()
                    return
                self.state.packed_units += quantity

    @task
    def measure_and_close(self):
        package_id = self.state.package_ids[-1]
        self.client.patch(f"/packages/{package_id}", json=package_measures(), name="PATCH /packages/{id}")
        with self.client.put(
            f"/packages/{package_id}/close",
            catch_response=True,
            name="PUT /packages/{id}/close",
        ) as resp:
            if resp.status_code != 200:
                resp.failure(f"Close failed: {resp.status_code} — {extract_error_detail(resp)}")
                self.interrupt()

    @task
    def label_and_ship(self):
        package_id = self.state.package_ids[-1]
        self.client.put(f"/packages/{package_id}/label", json=label_data(), name="PUT /packages/{id}/label")
        self.client.get(f"/packages/{package_id}/label", name="GET /packages/{id}/label")
        with self.client.put(
            f"/packages/{package_id}/ship",
            catch_response=True,
            name="PUT /packages/{id}/ship",
        ) as resp:
            if resp.status_code != 200:
                resp.failure(f"Ship failed: {resp.status_code} — {extract_error_detail(resp)}")

    @task
    def summary(self):
        self.client.get(
            f"/operations/{self.state.operation_id}/packing-summary",
            name="GET /operations/{id}/packing-summary",
        )
        self.interrupt()


class CompetingPackagesJourney(_PackingSetup):
    """Setup -> Two packages each try to take all fulfilled units.

    The second request must be refused with 409; anything else means the
    fulfilled quantity was over-packed.
    """

    @task
    def setup(self):
        self._setup_operation()
        self._open_package()
        self._open_package()

    @task
    def compete(self):
        if len(self.state.package_ids) < 2:
            self.interrupt()
            return
        item_id, quantity = next(iter(self.fulfilled.items()))
        if quantity == 0:
            self.interrupt()
            return
        for n, package_id in enumerate(self.state.package_ids[:2]):
            with self.client.put(
                f"/packages/{package_id}/items",
                json={"operation_item_id": item_id, "quantity": quantity},
                catch_response=True,
                name="PUT /packages/{id}/items",
            ) as resp:
                if n == 0 and resp.status_code != 201:
                    resp.failure(f"Pack failed: {resp.status_code} — {extract_error_detail(resp)}")
                elif n == 1 and resp.status_code == 409:
                    self.state.conflicts += 1
                    resp.success()
                elif n == 1:
                    resp.failure(f"Expected 409 for over-packing, got {resp.status_code}")

    @task
    def release(self):
        package_id = self.state.package_ids[0]
        self.client.put(f"/packages/{package_id}/cancel", json={"reason": "Repack"}, name="PUT /packages/{id}/cancel")
        self.client.get(
            f"/operations/{self.state.operation_id}/available-items",
            name="GET /operations/{id}/available-items",
        )
        self.interrupt()


class PackingUser(HttpUser):
    """Locust user simulating packing stations.

    Weighted distribution:
    - 70% Pack and ship
    - 30% Competing packages
    """

    wait_time = between(0.5, 2.0)
    tasks = {
        PackageShippingJourney: 7,
        CompetingPackagesJourney: 3,
    }

    def on_start(self):
        self.client.headers.update({"X-Tenant-ID": tenant_id(), "X-User-ID": user_id("packer")})
