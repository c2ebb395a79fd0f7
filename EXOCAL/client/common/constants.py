from __future__ import annotations

from os.path import abspath, join

# [PATHS]
###############################################################################
ROOT_DIR = abspath(join(__file__, "../../../.."))
PROJECT_DIR = join(ROOT_DIR, "EXOCAL")
SETTING_PATH = join(PROJECT_DIR, "settings")
RESOURCES_PATH = join(PROJECT_DIR, "resources")
LOGS_PATH = join(RESOURCES_PATH, "logs")
RESULTS_PATH = join(RESOURCES_PATH, "results")
ENV_FILE_PATH = join(SETTING_PATH, ".env")


###############################################################################
CONFIGURATION_FILE = join(SETTING_PATH, "configurations.json")


###############################################################################
CLIENT_TITLE = "ExoCAL"
CLIENT_DESCRIPTION = "Exoplanet Candidate Assessment and Labelling"
CLIENT_VERSION = "1.0.0"


###############################################################################
DATASET_KOI = "koi"
DATASET_TOI = "toi"
DATASET_K2 = "k2"
DATASET_KINDS = (DATASET_KOI, DATASET_TOI, DATASET_K2)
DATASET_LABELS = {
    DATASET_KOI: "Kepler's Object of Interest",
    DATASET_TOI: "TESS Object of Interest",
    DATASET_K2: "Kepler's Second Mission (Reborn Kepler)",
}
DEMO_FIELD_TEMPLATE = "use_demo_{kind}"
DEMO_FIELD_VALUE = "true"
CSV_CONTENT_TYPE = "text/csv"


###############################################################################
DEFAULT_SERVICE_URL = "http://localhost:8000"
DEFAULT_REQUEST_TIMEOUT = 30.0
DEFAULT_HEALTH_TIMEOUT = 5.0
DEFAULT_POLLING_INTERVAL = 0.2
DEFAULT_LIMIT_TARGETS = 50
MIN_LIMIT_TARGETS = 1
MAX_LIMIT_TARGETS = 1000
DEFAULT_SEED = 7
MIN_SEED = 1
MAX_SEED = 100
RESULTS_FILENAME = "results.zip"
JOB_BUNDLE_FILENAME_TEMPLATE = "exocal_results_{job_id}.zip"


###############################################################################
UPLOAD_ENDPOINT = "/api/upload"
HEALTH_ENDPOINT = "/health"
JOBS_ROUTER_PREFIX = "/api/jobs"
JOB_FIGURES_ENDPOINT = "/{job_id}/figs"
JOB_ARTIFACTS_ENDPOINT = "/{job_id}/artifacts"
JOB_CANDIDATES_ENDPOINT = "/{job_id}/top-candidates.csv"
JOB_DOWNLOAD_ENDPOINT = "/{job_id}/download"
QUERY_LIMIT_TARGETS = "limit_targets"
QUERY_SEED = "seed"


###############################################################################
JOB_STATE_RUNNING = "running"
JOB_STATE_DONE = "done"
JOB_STATE_ERROR = "error"


###############################################################################
NO_INPUT_MESSAGE = "no input provided"
NO_INPUT_HINT = "Please upload at least one CSV file (KOI, TOI, or K2)."
FILE_UNREADABLE_MESSAGE = "Cannot read selected file {filename}"
ENDPOINT_NOT_FOUND_MESSAGE = (
    "API endpoint not found. Please check your server configuration."
)
SERVER_FAILURE_MESSAGE = "Server error occurred. Please try again later."
CONNECTION_FAILURE_MESSAGE = (
    "Cannot connect to server. Please check your connection and server status."
)
HTML_ERROR_MESSAGE = "Server returned an error. Please check your API endpoint."
SUBMISSION_FALLBACK_MESSAGE = "Something went wrong while sending files."
MALFORMED_SUBMISSION_MESSAGE = "Unexpected response from the analysis service."
STATUS_CHECK_FAILED_MESSAGE = "Failed to check job status"
JOB_FAILED_FALLBACK_MESSAGE = "Analysis failed"
RESULTS_LOAD_FAILED_MESSAGE = "Failed to load results data"
RESULTS_DOWNLOAD_FAILED_MESSAGE = "Failed to download results"


###############################################################################
CANDIDATE_NUMERIC_COLUMNS = (
    "prob",
    "label",
    "P_days",
    "Dur_hr",
    "Rp_Re",
    "Teff_K",
    "Depth_ppm",
    "Rstar_Rsun",
)
CANDIDATE_NUMERIC_FALLBACK = 0.0
