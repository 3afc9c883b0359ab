from __future__ import annotations

from incident_insights.analyzers.base import Analyzer
from incident_insights.analyzers.buckets import TemporalBucketsAnalyzer
from incident_insights.analyzers.heatmap import HeatmapAnalyzer
from incident_insights.analyzers.latency import ResponseLatencyAnalyzer
from incident_insights.analyzers.overview import OverviewAnalyzer
from incident_insights.analyzers.patterns import PatternsAnalyzer
from incident_insights.analyzers.ranking import PriorityRankingAnalyzer
from incident_insights.analyzers.sentiment import SentimentAnalyzer
from incident_insights.config import AppConfig


def default_analyzers(config: AppConfig) -> list[Analyzer]:
    return [
        OverviewAnalyzer(
            period_days=config.overview.period_days,
            recent_days=config.overview.recent_days,
            alert_window_hours=config.overview.alert_window_hours,
        ),
        TemporalBucketsAnalyzer(
            granularity=config.buckets.granularity,
            chronological=config.buckets.chronological,
        ),
        HeatmapAnalyzer(weighting=config.heatmap.weighting),
        ResponseLatencyAnalyzer(),
        PriorityRankingAnalyzer(top_n=config.ranking.top_n),
        PatternsAnalyzer(),
        SentimentAnalyzer(),
    ]
