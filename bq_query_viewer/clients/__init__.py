"""BigQuery client used to fetch job metadata."""
