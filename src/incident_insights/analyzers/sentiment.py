from __future__ import annotations

from dataclasses import asdict, dataclass

import pandas as pd

from incident_insights.analyzers.base import Analyzer, AnalysisResult

POSITIVE_KEYWORDS = ("fixed", "resolved", "thanks", "great", "good", "quick", "helpful")
# "urgent" is a literal negative keyword, unrelated to the urgent bucket below.
NEGATIVE_KEYWORDS = ("broken", "dangerous", "urgent", "failed", "complaint", "issue", "problem")
URGENT_KEYWORDS = ("emergency", "critical", "immediately", "danger", "safety", "accident")


@dataclass(frozen=True)
class SentimentRule:
    label: str
    keywords: tuple[str, ...]

    def matches(self, text: str) -> bool:
        return any(keyword in text for keyword in self.keywords)


# First matching rule wins.
SENTIMENT_RULES = (
    SentimentRule("urgent", URGENT_KEYWORDS),
    SentimentRule("negative", NEGATIVE_KEYWORDS),
    SentimentRule("positive", POSITIVE_KEYWORDS),
)


@dataclass(frozen=True)
class SentimentSummary:
    positive: int = 0
    negative: int = 0
    urgent: int = 0
    total: int = 0


def classify_text(text: str | None) -> str | None:
    lowered = (text or "").lower()
    for rule in SENTIMENT_RULES:
        if rule.matches(lowered):
            return rule.label
    return None


def _report_text(reports: pd.DataFrame) -> pd.Series:
    parts = [
        reports[column].fillna("").astype(str)
        for column in ("title", "description")
        if column in reports.columns
    ]
    if not parts:
        return pd.Series("", index=reports.index, dtype=str)
    text = parts[0]
    for part in parts[1:]:
        text = text + " " + part
    return text


def sentiment_labels(reports: pd.DataFrame) -> pd.Series:
    """Per-report label, ``None`` where no rule matches."""
    text = _report_text(reports)
    return pd.Series([classify_text(value) for value in text], index=text.index, dtype=object)


def classify_sentiment(reports: pd.DataFrame) -> SentimentSummary:
    labels = sentiment_labels(reports)
    counts = labels.value_counts()
    return SentimentSummary(
        positive=int(counts.get("positive", 0)),
        negative=int(counts.get("negative", 0)),
        urgent=int(counts.get("urgent", 0)),
        total=int(len(reports)),
    )


class SentimentAnalyzer(Analyzer):
    name = "sentiment"

    def run(self, df: pd.DataFrame, now: pd.Timestamp) -> AnalysisResult:
        labels = sentiment_labels(df)
        summary = classify_sentiment(df)
        table = pd.DataFrame(
            {
                "id": pd.Series(
                    df["id"].to_numpy() if "id" in df.columns else None,
                    index=labels.index,
                    dtype=object,
                ),
                "sentiment": labels,
            }
        ).reset_index(drop=True)
        return AnalysisResult(analyzer=self.name, summary=asdict(summary), tables={"labels": table})
