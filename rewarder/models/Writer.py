import json, csv
from pathlib import Path
from dataclasses import dataclass
from typing import Any

from rewarder.models.Config import Config
from rewarder.models.Reconciliation import CampaignReport, ClaimableCampaign


def flatten(data: Any, prefix: str = "") -> dict[str, Any]:
    """
    Nested dicts and lists to a single level dict for csv output
    {"campaign": {"rewardToken": {"symbol": "USDC"}}} -> {"campaign_rewardToken_symbol": "USDC"}
    """
    if isinstance(data, dict):
        items = data.items()
    elif isinstance(data, list):
        items = ((str(i), v) for i, v in enumerate(data))
    else:
        return {prefix: data}

    out: dict[str, Any] = {}
    for key, value in items:
        out.update(flatten(value, f"{prefix}_{key}" if prefix else key))
    return out


def columns(rows: list[dict[str, Any]]) -> list[str]:
    """Every key seen across the rows, in first seen order. Optional fields can differ per row."""
    return list(dict.fromkeys(k for row in rows for k in row))


@dataclass
class Writer:
    """
    Writes a run's output under `{root}/{chain_id}-{user}/`, each table as both
    `json/{name}.json` and a flattened `csv/{name}.csv`
    """

    config: Config
    root: str = "reports"

    @property
    def path(self) -> str:
        return f"{self.root}/{self.config.report_name}"

    @property
    def csv_path(self) -> str:
        return f"{self.path}/csv"

    @property
    def json_path(self) -> str:
        return f"{self.path}/json"

    def _create_dir(self) -> None:
        Path(self.csv_path).mkdir(parents=True, exist_ok=True)
        Path(self.json_path).mkdir(parents=True, exist_ok=True)

    def to_csv(self, rows: list[dict[str, Any]], name: str) -> None:
        self._create_dir()
        with open(f"{self.csv_path}/{name}.csv", "w+", newline="") as f:
            writer = csv.DictWriter(f, fieldnames=columns(rows), restval="")
            writer.writeheader()
            writer.writerows(rows)

    def to_json(self, data: Any, name: str) -> None:
        self._create_dir()
        with open(f"{self.json_path}/{name}.json", "w") as f:
            json.dump(data, f, indent=4)

    def to_csv_and_json(self, data: Any, name: str) -> None:
        rows = [flatten(d) for d in data] if isinstance(data, list) else [flatten(data)]
        self.to_json(data, name)
        self.to_csv(rows, name)

    def write_claimable(self, claimable: list[ClaimableCampaign]) -> None:
        self.to_csv_and_json([c.model_dump(mode="json") for c in claimable], "claimable")

    def write_claims(self, reports: list[CampaignReport]) -> None:
        # records and proofs make the full report too wide for a csv
        self.to_json([r.model_dump(mode="json") for r in reports], "claims")
        self.to_csv(
            [
                {
                    "campaignId": r.rewards.campaign.campaignId,
                    "symbol": r.rewardTokenSymbol,
                    "claimed": r.formatted.remaining,
                    "transactionHash": r.transaction.transactionHash if r.transaction else "",
                    "gasUsed": r.transaction.gasUsed if r.transaction else "",
                }
                for r in reports
            ],
            "claims",
        )

    def write_errors(self, events: list) -> None:
        """`events` are the `RecordedEvent`s kept by a `MemoryRecorder`"""
        self.to_csv_and_json(
            [
                {
                    "error": type(e.error).__name__,
                    "message": str(e.error),
                    "operation": e.context.operation,
                    "chain_id": e.context.chain_id,
                    "campaign_id": e.context.campaign_id,
                    "page": e.context.page,
                    "timestamp": e.context.timestamp,
                }
                for e in events
            ],
            "errors",
        )
