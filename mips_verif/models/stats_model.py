#    Copyright 2026 Two Sigma Open Source, LLC
#
#    Licensed under the Apache License, Version 2.0 (the "License");
#    you may not use this file except in compliance with the License.
#    You may obtain a copy of the License at
#
#        http://www.apache.org/licenses/LICENSE-2.0
#
#    Unless required by applicable law or agreed to in writing, software
#    distributed under the License is distributed on an "AS IS" BASIS,
#    WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
#    See the License for the specific language governing permissions and
#    limitations under the License.

"""Run statistics reported by the hardware model.

Stats Model
===========

The model reports free-form labelled events ("br_miss", "ic_miss", ...),
branch predictor outcomes and branch-target-buffer hits. They are only
counted here; nothing is reset until the run ends.
"""

from dataclasses import dataclass, field


@dataclass
class StatsModel:
    """Track labelled event counts and branch predictor statistics."""

    labels: dict[str, int] = field(default_factory=dict)
    branch_predictions: int = 0
    correct_predictions: int = 0
    btb_hits: int = 0

    def record(self, label: str) -> None:
        """Increment the counter for a label, creating it on first use."""
        self.labels[label] = self.labels.get(label, 0) + 1

    def branch_outcome(self, predicted: int, actual: int) -> None:
        """Record one branch prediction and whether it was correct."""
        if predicted == actual:
            self.correct_predictions += 1
        self.branch_predictions += 1

    def btb_hit(self, hit: int) -> None:
        """Record a branch-target-buffer lookup; only hits are counted."""
        if hit:
            self.btb_hits += 1

    def count(self, label: str) -> int:
        """Return the count of a label without creating it."""
        return self.labels.get(label, 0)

    @property
    def prediction_accuracy(self) -> float | None:
        """Fraction of correct predictions, or None before any prediction."""
        if self.branch_predictions == 0:
            return None
        return self.correct_predictions / self.branch_predictions

    def report(self) -> str:
        """Generate the statistics section of the final report."""
        lines = ["\n== Stats ==============="]
        for label in sorted(self.labels):
            lines.append(f"{label}: {self.labels[label]}")
        lines.append(f"branch predicted correctly: {self.correct_predictions}")
        lines.append(f"branch: {self.branch_predictions}")
        lines.append(f"btb hits: {self.btb_hits}")
        return "\n".join(lines)
