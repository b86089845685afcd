"""Route Modules — one file per resource, each with its own APIRouter."""
