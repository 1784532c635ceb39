"""
AQI Reconcile — Data Pipeline Package.

Components:
    - ingestion: source connectors (CPCB cache, OpenAQ, historical, IoT) and data models
    - classification: freshness buckets and AQI categories
    - normalization: source scale adjustment and PM2.5 → AQI conversion
    - confidence: cross-source agreement, derived AQI, data-quality warnings
    - trends: synthetic 24-hour trend series
    - reconciler: concurrent fan-out and reconciliation of one city's readings
"""
