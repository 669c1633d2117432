"""Mixed warehouse workload scenario.

Combines operation and packing journeys with weights that model a busy
warehouse shift. This is the recommended scenario for load baseline testing.
"""

from locust import HttpUser, between

from loadtests.data_generators import tenant_id, user_id
from loadtests.scenarios.operations import (
    BatchCompletionJourney,
    BoardReader,
    OperationCancellationJourney,
    OperationFulfillmentJourney,
)
from loadtests.scenarios.packing import CompetingPackagesJourney, PackageShippingJourney


class MixedWorkloadUser(HttpUser):
    """Realistic mixed workload for one tenant.

    Operations (60%):
    - Item-by-item fulfillment: the bulk of floor activity
    - Batch completion: scanners uploading finished lists
    - Cancellation: occasional

    Packing (25%):
    - Pack and ship: most common
    - Competing packages: exercises the over-packing conflict path

    Board reads (15%): supervisors refreshing dashboards.
    """

    wait_time = between(0.5, 3.0)
    tasks = {
        OperationFulfillmentJourney: 8,
        BatchCompletionJourney: 2,
        OperationCancellationJourney: 2,
        PackageShippingJourney: 4,
        CompetingPackagesJourney: 1,
        BoardReader: 3,
    }

    def on_start(self):
        self.client.headers.update({"X-Tenant-ID": tenant_id(), "X-User-ID": user_id("operator")})
