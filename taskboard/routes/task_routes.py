from flask import Blueprint, current_app, jsonify, request

from taskboard.models.task_model import missing_fields
from taskboard.services.result import Err, ErrorKind
from taskboard.utils.db import is_valid_object_id, serialize_doc

tasks_bp = Blueprint("tasks", __name__)

SERVICE_KEY = "task_service"

ERROR_STATUS = {
    ErrorKind.VALIDATION: 400,
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.STORAGE: 500,
}


def get_task_service():
    return current_app.extensions[SERVICE_KEY]


def error_response(err):
    status = ERROR_STATUS[err.kind]
    if err.kind is ErrorKind.STORAGE:
        # Details were logged by the service; clients get a generic message.
        return jsonify(message="Internal server error"), status
    body = {"message": err.message}
    if err.details:
        body.update(err.details)
    return jsonify(body), status


def invalid_id_response():
    return jsonify(message="Invalid task ID"), 400


@tasks_bp.get("")
def list_tasks():
    user_id = request.args.get("userId")
    if not user_id:
        return jsonify(message="userId is required"), 400

    result = get_task_service().list_tasks(user_id)
    if isinstance(result, Err):
        return error_response(result)
    return jsonify([serialize_doc(task.to_dict()) for task in result.value]), 200


@tasks_bp.post("")
def create_task():
    payload = request.get_json(silent=True)
    current_app.logger.debug("Received task: %s", payload)
    if not isinstance(payload, dict):
        payload = {}

    missing = missing_fields(payload)
    if missing:
        return jsonify(message="Missing required fields", missing=missing, received=payload), 400

    result = get_task_service().create_task(payload)
    if isinstance(result, Err):
        return error_response(result)
    return jsonify(_id=str(result.value)), 201


@tasks_bp.put("/<task_id>")
def update_task(task_id):
    if not is_valid_object_id(task_id):
        return invalid_id_response()

    payload = request.get_json(silent=True)
    if not isinstance(payload, dict):
        payload = {}

    result = get_task_service().update_task(task_id, payload)
    if isinstance(result, Err):
        return error_response(result)
    message = "Task updated successfully" if result.value else "Task unchanged"
    return jsonify(message=message), 200


@tasks_bp.delete("/<task_id>")
def delete_task(task_id):
    if not is_valid_object_id(task_id):
        return invalid_id_response()

    result = get_task_service().delete_task(task_id)
    if isinstance(result, Err):
        return error_response(result)
    return jsonify(message="Task deleted successfully"), 200


@tasks_bp.post("/reorder")
def reorder_tasks():
    payload = request.get_json(silent=True) or {}
    tasks = payload.get("tasks") if isinstance(payload, dict) else None
    if not isinstance(tasks, list) or not tasks:
        return jsonify(message="Invalid tasks data"), 400

    result = get_task_service().reorder_tasks(tasks)
    if isinstance(result, Err):
        return error_response(result)
    if not result.value:
        return jsonify(message="Failed to reorder tasks"), 400
    return jsonify(message="Tasks reordered successfully"), 200
