from __future__ import annotations

import pytest

from factories import citizen, make_reconciler, make_trip
from fleetfuel.application.services.budget_reconciler import BudgetReconciler


@pytest.fixture
def citizen_at_75_percent() -> BudgetReconciler:
    return make_reconciler(
        [citizen(budget="500")],
        [make_trip("citizen_1", "200"), make_trip("citizen_1", "175")],
    )
