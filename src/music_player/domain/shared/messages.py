"""Centralized message constants for error messages and log output."""

from __future__ import annotations


class ErrorMessages:
    """Error messages for exceptions and validation failures."""

    # Track Validation Errors
    EMPTY_TRACK_ID = "Track ID cannot be empty"
    MISSING_CATALOG_FIELD = "Catalog record is missing required field '{field}'"

    # Settings Validation Errors
    INVALID_LOG_LEVEL = "Invalid log level: {level}. Must be one of {valid_levels}"

    # Audio Backend Errors
    EXECUTABLE_NOT_FOUND = "executable '{name}' not found"
    RESOURCE_DISPOSED = "audio resource has been disposed"
    SIMULATED_REJECTION = "rejected by simulated host"
    OUTPUT_INTERRUPTED = "audio output stopped unexpectedly"

    # Entry Point Errors
    TRACK_FILE_UNREADABLE = "Could not read track list %s: %s"
    TRACK_FILE_EMPTY = "Track list %s contains no tracks"
    START_TRACK_NOT_FOUND = "Start track %s is not in %s"


class LogTemplates:
    """Log message templates for structured logging.

    Use these with logger.info(), logger.error(), etc. and pass values as parameters
    for proper log formatting and structured logging support.
    """

    # Session Lifecycle
    SESSION_DETACHED = "Detached session for %s"
    SESSION_STARTING = "Starting session for %s (%s)"
    RESOURCE_CREATE_FAILED = "Could not create audio resource for %s: %s"

    # Transport
    PLAYBACK_CONFIRMED = "Playback confirmed for %s"
    PLAYBACK_REJECTED = "Playback of %s rejected: %s"
    PLAYBACK_FAILED = "Audio output for %s stopped at %.1fs"
    PLAYBACK_PAUSED = "Paused %s"
    PLAYBACK_RESUMING = "Resuming %s at %.1fs"
    PLAYBACK_SEEK = "Seek %s to %.1fs"
    VOLUME_CHANGED = "Volume set to %d"
    STALE_EVENT_IGNORED = "Ignoring %s from superseded session for %s"
    STALE_START_IGNORED = "Ignoring start result from superseded session for %s"

    # Queue
    QUEUE_REPLACED = "Queue replaced with %d tracks (cursor %d)"
    QUEUE_REPOSITIONED = "Queue cursor moved to %d for %s"
    QUEUE_COLLAPSED = "%s not in queue; queue collapsed to a single track"
    QUEUE_NO_NEIGHBOUR = "No %s track in queue (cursor %d of %d)"

    # Completion
    TRACK_COMPLETED = "Track %s completed"
    AUTO_ADVANCE_SCHEDULED = "Auto-advance in %.2fs"
    AUTO_ADVANCE_STALE = "Auto-advance timer fired for superseded session; ignoring"
    QUEUE_EXHAUSTED = "Queue exhausted after %s"

    # Likes
    TRACK_LIKED = "Liked %s"
    TRACK_UNLIKED = "Unliked %s"

    # Engine Lifecycle
    ENGINE_SHUTDOWN = "Playback engine shut down"
    RESOURCE_DISPOSE_FAILED = "Error disposing audio resource for %s"

    # Audio Backends
    FFPLAY_STARTED = "ffplay started for %s (pid %s, offset %.1fs)"
    FFPLAY_EXITED = "ffplay for %s exited with code %s"
    FFPLAY_SUPERSEDED = "ffplay start for %s superseded; starting again at %.1fs"
    FFPLAY_KILLED = "ffplay for %s (pid %s) ignored SIGTERM; killing"
    FFPROBE_FAILED = "ffprobe could not read duration of %s: %s"
    SIMULATED_TICK_STOPPED = "Simulated clock for %s stopped"

    # Application Lifecycle
    APP_STARTING = "Starting music player (environment=%s, backend=%s)"
    APP_LOADED_TRACKS = "Loaded %d tracks from %s"
    APP_FINISHED = "Queue finished; shutting down"
    APP_INTERRUPTED = "Interrupted; shutting down"
    CONTAINER_SHUTDOWN = "Container shut down"
