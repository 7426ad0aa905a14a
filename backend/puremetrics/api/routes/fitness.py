from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel

from puremetrics.api.deps import get_manager
from puremetrics.core.exceptions import NotFoundError, ValidationError
from puremetrics.models import (
    CustomExercise,
    CustomWorkout,
    ExerciseCategory,
    ExerciseSet,
    ExerciseType,
    FitnessSession,
    TimeRange,
)
from puremetrics.services.data_manager import DataManager

router = APIRouter()


# =========================================================================
# Request/Response Models
# =========================================================================


class ExerciseAdd(BaseModel):
    exercise_type: Optional[ExerciseType] = None
    custom_exercise_id: Optional[UUID] = None


class SetCreate(BaseModel):
    reps: Optional[int] = None
    weight: Optional[float] = None
    time: Optional[float] = None
    distance: Optional[float] = None


class CustomExerciseUpdate(BaseModel):
    name: str
    category: ExerciseCategory


def fitness_session_to_response(session: FitnessSession) -> dict:
    return {
        **session.model_dump(mode="json"),
        "total_exercises": session.total_exercises,
        "total_sets": session.total_sets,
        "total_reps": session.total_reps,
        "duration_seconds": session.duration.total_seconds(),
    }


def workout_to_response(workout: CustomWorkout) -> dict:
    return {
        **workout.model_dump(mode="json"),
        "total_sets": workout.total_sets,
        "total_reps": workout.total_reps,
        "estimated_duration_minutes": workout.estimated_duration,
    }


def _current(manager: DataManager) -> dict:
    return fitness_session_to_response(manager.current_fitness_session)


# =========================================================================
# Current workout
# =========================================================================


@router.get("/current")
async def get_current_workout(manager: DataManager = Depends(get_manager)):
    return _current(manager)


@router.post("/current/start")
async def start_workout(manager: DataManager = Depends(get_manager)):
    manager.start_fitness_session()
    return _current(manager)


@router.post("/current/pause")
async def pause_workout(manager: DataManager = Depends(get_manager)):
    manager.pause_fitness_session()
    return _current(manager)


@router.post("/current/resume")
async def resume_workout(manager: DataManager = Depends(get_manager)):
    manager.resume_fitness_session()
    return _current(manager)


@router.post("/current/stop")
async def stop_workout(manager: DataManager = Depends(get_manager)):
    manager.stop_fitness_session()
    return _current(manager)


@router.post("/current/save", status_code=201)
async def save_workout(manager: DataManager = Depends(get_manager)):
    if not manager.save_current_fitness_session():
        raise ValidationError("exercise_sessions", "current workout has no exercises")
    return fitness_session_to_response(manager.fitness_sessions[0])


@router.delete("/current")
async def clear_workout(manager: DataManager = Depends(get_manager)):
    manager.clear_current_fitness_session()
    return _current(manager)


@router.post("/current/exercises", status_code=201)
async def add_exercise(request: ExerciseAdd, manager: DataManager = Depends(get_manager)):
    if not manager.add_exercise_session(request.exercise_type, request.custom_exercise_id):
        raise ValidationError("exercise", "a known exercise type or custom exercise is required")
    return _current(manager)


@router.delete("/current/exercises/{index}")
async def remove_exercise(index: int, manager: DataManager = Depends(get_manager)):
    manager.remove_exercise_session(index)
    return _current(manager)


@router.post("/current/exercises/{index}/complete")
async def complete_exercise(index: int, manager: DataManager = Depends(get_manager)):
    manager.complete_exercise_session(index)
    return _current(manager)


@router.post("/current/exercises/{index}/sets", status_code=201)
async def add_set(index: int, request: SetCreate, manager: DataManager = Depends(get_manager)):
    if not manager.add_exercise_set(index, ExerciseSet(**request.model_dump())):
        raise ValidationError("set", "unknown exercise or a set without reps, weight, time or distance")
    return _current(manager)


@router.delete("/current/exercises/{index}/sets/{set_index}")
async def remove_set(index: int, set_index: int, manager: DataManager = Depends(get_manager)):
    manager.remove_exercise_set(index, set_index)
    return _current(manager)


# =========================================================================
# History and analysis
# =========================================================================


@router.get("/sessions")
async def list_workouts(
    favorites: bool = Query(False),
    manager: DataManager = Depends(get_manager),
):
    sessions = manager.fitness_sessions
    if favorites:
        sessions = [s for s in sessions if s.is_favorite]
    return {"sessions": [fitness_session_to_response(s) for s in sessions], "count": len(sessions)}


@router.post("/sessions/{session_id}/favorite")
async def toggle_favorite(session_id: UUID, manager: DataManager = Depends(get_manager)):
    if not manager.toggle_workout_favorite(session_id):
        raise NotFoundError("Fitness session", session_id)
    return fitness_session_to_response(manager.get_record("fitness_sessions", session_id))


@router.delete("/sessions/{session_id}")
async def delete_workout(session_id: UUID, manager: DataManager = Depends(get_manager)):
    if not manager.delete_fitness_session(session_id):
        raise NotFoundError("Fitness session", session_id)
    return {"deleted": 1}


@router.get("/trends")
async def fitness_trends(
    exercise_type: ExerciseType = Query(...),
    time_range: TimeRange = Query(TimeRange.MONTH),
    manager: DataManager = Depends(get_manager),
):
    points = manager.fitness_trends(exercise_type, time_range)
    return {"points": [p.model_dump(mode="json") for p in points], "count": len(points)}


@router.get("/trends/analysis")
async def fitness_trend_analysis(
    exercise_type: ExerciseType = Query(...),
    time_range: TimeRange = Query(TimeRange.MONTH),
    manager: DataManager = Depends(get_manager),
):
    analysis = manager.fitness_trend_analysis(exercise_type, time_range)
    return {
        **analysis.model_dump(mode="json"),
        "weight_change_display": analysis.weight_change_string,
        "improvement_display": analysis.improvement_string,
    }


@router.get("/stats")
async def exercise_stats(
    exercise_type: ExerciseType = Query(...),
    manager: DataManager = Depends(get_manager),
):
    return manager.exercise_stats(exercise_type).model_dump(mode="json")


# =========================================================================
# Custom workouts
# =========================================================================


@router.get("/workouts")
async def list_custom_workouts(manager: DataManager = Depends(get_manager)):
    workouts = manager.custom_workouts
    return {"workouts": [workout_to_response(w) for w in workouts], "count": len(workouts)}


@router.post("/workouts", status_code=201)
async def create_custom_workout(workout: CustomWorkout, manager: DataManager = Depends(get_manager)):
    if not manager.save_custom_workout(workout):
        raise ValidationError("workout", "a name is required and every exercise needs at least one set")
    return workout_to_response(workout)


@router.put("/workouts/{workout_id}")
async def update_custom_workout(
    workout_id: UUID,
    workout: CustomWorkout,
    manager: DataManager = Depends(get_manager),
):
    if manager.get_record("custom_workouts", workout_id) is None:
        raise NotFoundError("Custom workout", workout_id)
    workout = workout.model_copy(update={"id": workout_id})
    if not manager.update_custom_workout(workout):
        raise ValidationError("workout", "a name is required and every exercise needs at least one set")
    return workout_to_response(workout)


@router.delete("/workouts/{workout_id}")
async def delete_custom_workout(workout_id: UUID, manager: DataManager = Depends(get_manager)):
    if not manager.delete_custom_workout(workout_id):
        raise NotFoundError("Custom workout", workout_id)
    return {"deleted": 1}


@router.post("/workouts/{workout_id}/favorite")
async def toggle_custom_workout_favorite(workout_id: UUID, manager: DataManager = Depends(get_manager)):
    if not manager.toggle_custom_workout_favorite(workout_id):
        raise NotFoundError("Custom workout", workout_id)
    return workout_to_response(manager.get_record("custom_workouts", workout_id))


@router.post("/workouts/{workout_id}/apply")
async def apply_custom_workout(workout_id: UUID, manager: DataManager = Depends(get_manager)):
    """Load the template into the current workout."""
    if not manager.apply_custom_workout(workout_id):
        raise NotFoundError("Custom workout", workout_id)
    return _current(manager)


# =========================================================================
# Custom exercises
# =========================================================================


@router.get("/exercises")
async def list_custom_exercises(manager: DataManager = Depends(get_manager)):
    exercises = manager.custom_exercises
    return {"exercises": [e.model_dump(mode="json") for e in exercises], "count": len(exercises)}


@router.post("/exercises", status_code=201)
async def create_custom_exercise(exercise: CustomExercise, manager: DataManager = Depends(get_manager)):
    if not manager.add_custom_exercise(exercise):
        raise ValidationError("name", "exercise name must not be blank")
    return exercise.model_dump(mode="json")


@router.put("/exercises/{exercise_id}")
async def update_custom_exercise(
    exercise_id: UUID,
    request: CustomExerciseUpdate,
    manager: DataManager = Depends(get_manager),
):
    if manager.get_record("custom_exercises", exercise_id) is None:
        raise NotFoundError("Custom exercise", exercise_id)
    if not manager.update_custom_exercise(exercise_id, request.name, request.category):
        raise ValidationError("name", "exercise name must not be blank")
    return manager.get_record("custom_exercises", exercise_id).model_dump(mode="json")


@router.delete("/exercises/{exercise_id}")
async def delete_custom_exercise(exercise_id: UUID, manager: DataManager = Depends(get_manager)):
    if not manager.delete_custom_exercise(exercise_id):
        raise NotFoundError("Custom exercise", exercise_id)
    return {"deleted": 1}
