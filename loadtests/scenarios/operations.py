"""Operation load test scenarios.

Stateful SequentialTaskSet journeys covering item-by-item fulfillment,
batch completion, cancellation and the board reports read by supervisors.
"""

import random

from locust import HttpUser, SequentialTaskSet, TaskSet, between, task

from loadtests.data_generators import cancel_reason, operation_data, tenant_id, user_id
from loadtests.helpers.response import extract_error_detail
from loadtests.helpers.state import OperationState


def _create_operation(taskset, state: OperationState, payload: dict) -> None:
    with taskset.client.post(
        "/operations",
        json=payload,
        catch_response=True,
        name="POST /operations",
    ) as resp:
        if resp.status_code != 201:
            resp.failure(f"Create operation failed: {resp.status_code} — {extract_error_detail(resp)}")
            taskset.interrupt()
            return
        state.operation_id = resp.json()["operation_id"]

    with taskset.client.get(
        f"/operations/{state.operation_id}",
        catch_response=True,
        name="GET /operations/{id}",
    ) as resp:
        if resp.status_code != 200:
            resp.failure(f"Fetch operation failed: {resp.status_code} — {extract_error_detail(resp)}")
            taskset.interrupt()
            return
        data = resp.json()
        state.folio = data["folio"]
        state.remaining = {item["id"]: item["demanded_quantity"] for item in data["items"]}


class OperationFulfillmentJourney(SequentialTaskSet):
    """Create -> Assign -> Start -> Process items in chunks -> Completed.

    The happy path. Each item is processed in one or more partial steps, so
    the operation passes through partial before it completes.
    """

    def on_start(self):
        self.state = OperationState()

    @task
    def create_operation(self):
        _create_operation(self, self.state, operation_data())

    @task
    def assign(self):
        with self.client.put(
            f"/operations/{self.state.operation_id}/assign",
            json={"user_id": user_id("picker")},
            catch_response=True,
            name="PUT /operations/{id}/assign",
        ) as resp:
            if resp.status_code == 200:
                self.state.current_status = resp.json()["status"]
            else:
                resp.failure(f"Assign failed: {resp.status_code} — {extract_error_detail(resp)}")
                self.interrupt()

    @task
    def start(self):
        with self.client.put(
            f"/operations/{self.state.operation_id}/start",
            catch_response=True,
            name="PUT /operations/{id}/start",
        ) as resp:
            if resp.status_code == 200:
                self.state.current_status = resp.json()["status"]
            else:
                resp.failure(f"Start failed: {resp.status_code} — {extract_error_detail(resp)}")
                self.interrupt()

    @task
    def process_items(self):
        for item_id, remaining in self.state.remaining.items():
            while remaining > 0:
                quantity = random.randint(1, remaining)
                with self.client.put(
                    f"/operations/{self.state.operation_id}/items/{item_id}/process",
                    json={"quantity": quantity},
                    catch_response=True,
                    name="PUT /operations/{id}/items/{item_id}/process",
                ) as resp:
                    if resp.status_code != 200:
                        resp.failure(f"Process item failed: {resp.status_code} — {extract_error_detail(resp)}")
                        self.interrupt()
                        return
                    self.state.current_status = resp.json()["status"]
                remaining -= quantity

    @task
    def verify_completed(self):
        with self.client.get(
            f"/operations/{self.state.operation_id}",
            catch_response=True,
            name="GET /operations/{id}",
        ) as resp:
            if resp.status_code == 200 and resp.json()["status"] != "completed":
                resp.failure(f"Expected completed, got {resp.json()['status']}")

    @task
    def done(self):
        self.interrupt()


class BatchCompletionJourney(SequentialTaskSet):
    """Create -> Complete every item in one batch request."""

    def on_start(self):
        self.state = OperationState()

    @task
    def create_operation(self):
        _create_operation(self, self.state, operation_data(num_items=random.randint(3, 8)))

    @task
    def complete(self):
        lines = [{"item_id": item_id, "quantity": quantity} for item_id, quantity in self.state.remaining.items()]
        with self.client.put(
            f"/operations/{self.state.operation_id}/complete",
            json={"items": lines},
            catch_response=True,
            name="PUT /operations/{id}/complete",
        ) as resp:
            if resp.status_code != 200:
                resp.failure(f"Complete failed: {resp.status_code} — {extract_error_detail(resp)}")
            elif resp.json()["status"] != "completed":
                resp.failure(f"Expected completed, got {resp.json()['status']}")

    @task
    def done(self):
        self.interrupt()


class OperationCancellationJourney(SequentialTaskSet):
    """Create -> Process part of one item -> Cancel -> Cancel again (idempotent)."""

    def on_start(self):
        self.state = OperationState()

    @task
    def create_operation(self):
        _create_operation(self, self.state, operation_data(num_items=2))

    @task
    def process_some(self):
        item_id, demanded = next(iter(self.state.remaining.items()))
        if demanded < 2:
            return
        with self.client.put(
            f"/operations/{self.state.operation_id}/items/{item_id}/process",
            json={"quantity": 1},
            catch_response=True,
            name="PUT /operations/{id}/items/{item_id}/process",
        ) as resp:
            if resp.status_code != 200:
                resp.failure(f"Process item failed: {resp.status_code} — {extract_error_detail(resp)}")

    @task
    def cancel(self):
        for _ in range(2):
            with self.client.put(
                f"/operations/{self.state.operation_id}/cancel",
                json={"reason": cancel_reason()},
                catch_response=True,
                name="PUT /operations/{id}/cancel",
            ) as resp:
                if resp.status_code != 200 or resp.json()["status"] != "cancelled":
                    resp.failure(f"Cancel failed: {resp.status_code} — {extract_error_detail(resp)}")
                    return

    @task
    def done(self):
        self.interrupt()


class BoardReader(TaskSet):
    """Supervisor dashboards: pending list, statistics and kanban."""

    @task(3)
    def pending(self):
        self.client.get("/operations/pending", name="GET /operations/pending")

    @task(2)
    def kanban(self):
        self.client.get("/operations/kanban", name="GET /operations/kanban")

    @task(1)
    def statistics(self):
        self.client.get("/operations/statistics", name="GET /operations/statistics")

    @task(1)
    def stop(self):
        self.interrupt()


class OperationUser(HttpUser):
    """Locust user simulating warehouse floor activity for one tenant.

    Weighted distribution:
    - 50% Item-by-item fulfillment
    - 20% Batch completion
    - 15% Cancellation
    - 15% Board reads
    """

    wait_time = between(0.5, 2.0)
    tasks = {
        OperationFulfillmentJourney: 10,
        BatchCompletionJourney: 4,
        OperationCancellationJourney: 3,
        BoardReader: 3,
    }

    def on_start(self):
        self.client.headers.update({"X-Tenant-ID": tenant_id(), "X-User-ID": user_id("operator")})
