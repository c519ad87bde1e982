import logging
import re

from flask import Blueprint, current_app, jsonify, request
from werkzeug.exceptions import HTTPException

from greenhouse.plant import (
    ConflictError,
    NotFoundError,
    PayloadError,
    PlantRequest,
    PlantStore,
    StorageError,
    ValidationError,
)

logger = logging.getLogger(__name__)

bp = Blueprint("plants", __name__)

PLANT_ID_PATTERN = re.compile(r"[+-]?[0-9]+")
# Ids are stored as BIGINT
PLANT_ID_MIN = -(2**63)
PLANT_ID_MAX = 2**63 - 1

INTERNAL_ERROR_MESSAGE = "An error occurred while processing the request"
DELETE_ERROR_MESSAGE = "An error occurred while deleting the plant"
NOT_FOUND_MESSAGE = "The specified Plant was not found"
INVALID_ID_MESSAGE = "The Plant id must be an integer"


def get_store() -> PlantStore:
    return current_app.extensions["plant_store"]


def error_response(status: int, message: str):
    return jsonify({"error": message}), status


def parse_plant_id(raw: str) -> int:
    """Parse a base-10 64-bit path id, raising ValidationError for anything else."""
    if not PLANT_ID_PATTERN.fullmatch(raw):
        raise ValidationError([INVALID_ID_MESSAGE])
    plant_id = int(raw)
    if not PLANT_ID_MIN <= plant_id <= PLANT_ID_MAX:
        raise ValidationError([INVALID_ID_MESSAGE])
    return plant_id


def parse_plant_request() -> PlantRequest:
    payload = request.get_json(force=True, silent=True)
    if payload is None:
        raise PayloadError("request body is not valid JSON")
    return PlantRequest.from_json(payload)


@bp.before_request
def log_request():
    logger.info("%s %s", request.method, request.path)


# =============================================================================
# Endpoints
# =============================================================================


@bp.route("", methods=["GET"])
def list_plants():
    """List all plants."""
    plants = get_store().list_all()
    return jsonify([plant.to_dict() for plant in plants])


@bp.route("/<plant_id>", methods=["GET"])
def get_plant(plant_id: str):
    """Get a plant by ID."""
    plant = get_store().get_by_id(parse_plant_id(plant_id))
    return jsonify(plant.to_dict())


@bp.route("", methods=["POST"])
def create_plant():
    """Create a new plant."""
    plant_request = parse_plant_request()
    violations = plant_request.validate(require_name=True)
    if violations:
        raise ValidationError(violations)

    plant_id = get_store().create(plant_request.to_plant())

    response = jsonify({})
    response.status_code = 201
    response.headers["Location"] = f"{request.path.rstrip('/')}/{plant_id}"
    return response


@bp.route("/<plant_id>", methods=["PUT"])
def put_plant(plant_id: str):
    """Replace the plant with this ID, inserting it when absent."""
    plant_request = parse_plant_request()
    plant_id = parse_plant_id(plant_id)
    violations = plant_request.validate(require_name=False)
    if violations:
        raise ValidationError(violations)

    store = get_store()
    if not plant_request.name:
        # Identity comes from the path; keep the stored name
        try:
            plant_request.name = store.get_by_id(plant_id).name
        except NotFoundError:
            raise ValidationError(["The name value is required"])

    store.upsert(plant_id, plant_request.to_plant(plant_id))
    return jsonify({}), 200


@bp.route("/<plant_id>", methods=["DELETE"])
def delete_plant(plant_id: str):
    """Delete a plant. Deleting an unknown ID succeeds."""
    get_store().delete_by_id(parse_plant_id(plant_id))
    return "", 204


# =============================================================================
# Error mapping
# =============================================================================


@bp.errorhandler(ValidationError)
def handle_validation_error(err: ValidationError):
    if isinstance(err, PayloadError):
        logger.info("The request body could not be parsed into a Plant: %s", err.detail)
    else:
        logger.info("The Plant request is invalid: %s", err)
    return error_response(400, str(err))


@bp.errorhandler(NotFoundError)
def handle_not_found(err: NotFoundError):
    logger.info("Plant %s was not found", err.plant_id)
    return error_response(404, NOT_FOUND_MESSAGE)


@bp.errorhandler(ConflictError)
def handle_conflict(err: ConflictError):
    message = f"Plant with {err.key} '{err.value}' already exists"
    logger.info(message)
    return error_response(409, message)


@bp.errorhandler(StorageError)
def handle_storage_error(err: StorageError):
    logger.error("Error occurred: %s", err, exc_info=err)
    if request.method == "DELETE":
        return error_response(500, DELETE_ERROR_MESSAGE)
    return error_response(500, INTERNAL_ERROR_MESSAGE)


@bp.errorhandler(Exception)
def handle_unexpected_error(err: Exception):
    if isinstance(err, HTTPException):
        return err
    logger.exception("Unexpected error while handling %s %s", request.method, request.path)
    return error_response(500, INTERNAL_ERROR_MESSAGE)
