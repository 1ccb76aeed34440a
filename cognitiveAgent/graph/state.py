"""Shared state definition for the plan execution graph."""

from __future__ import annotations

import operator
from typing import Annotated, List, TypedDict


class ExecutionState(TypedDict, total=False):
    """State carried between execution graph nodes.

    The plan itself lives on the model turn in the ledger; the graph only
    tracks where it is and the result context gathered so far.
    """

    turn_id: str
    step_idx: int        # next plan index to execute
    total_steps: int
    results: Annotated[List[str], operator.add]  # result-context lines in ordinal order
    halted: bool         # set once the cancellation token was observed
