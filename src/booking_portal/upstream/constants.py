"""Upstream endpoint paths, query parameters and record field names."""

# Endpoints
JOB_ENDPOINT = "/job.json"
JOB_CONTACT_ENDPOINT = "/jobcontact.json"

# Query parameters
FILTER_PARAM = "$filter"
CURSOR_PARAM = "cursor"
ACTIVE_JOBS_FILTER = "active eq 1"

# Pagination envelope
CURSOR_FIELD = "next_cursor"
CURSOR_HEADER = "x-next-cursor"
DEFAULT_COLLECTION_KEYS = ("jobs",)

# Job contact fields
CONTACT_EMAIL = "email"
CONTACT_JOB_UUID = "job_uuid"

# "Not set" marker used by upstream for every date column
ZERO_DATE = "0000-00-00 00:00:00"
