"""
Fail-fast tagging pipeline for oggify-tagger.

Runs the five steps that turn a raw audio stream into a tagged track,
strictly in order, one track at a time:

    STEP 1 write_track     - Write the input stream verbatim to the destination
    STEP 2 compose_tags    - Build SPOTIFY_ID / TITLE / ALBUM / ARTIST lines
    STEP 3 fetch_cover     - Download the cover image into a temporary file
    STEP 4 encode_picture  - Encode the image as a metadata_block_picture value
    STEP 5 merge_comments  - Replace the old picture, append tags, write back

Each step produces a StepResult. The first failing step stops the run and
later steps are never attempted. Nothing is retried.

Partial Effects:
    A failure after STEP 1 leaves the written audio on disk without new
    comments. The track is not rolled back.

Resources:
    The cover temporary file is registered on one ExitStack per run, so it
    is removed however the run ends (success, failed step, or exception).

Concurrency:
    No locking. Callers must not run two pipelines for the same
    destination at the same time.

Usage:
    from oggify_tagger.pipeline import TagPipeline, TagRequest

    request = TagRequest(
        source_id="spotify:track:abc",
        title="Song",
        album="Album",
        destination=Path("/data/tracks/song.ogg"),
        cover_url="https://i.scdn.co/image/...",
        artists=("Artist1", "Artist2"),
    )
    result = TagPipeline.from_config(config).run(request, sys.stdin.buffer)
    if not result.succeeded:
        print(f"{result.failed_step.name} failed: {result.error}")
"""

from contextlib import ExitStack
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, BinaryIO, Callable

import requests

from oggify_tagger.core.config import Config, DEFAULT_MIME_TYPE
from oggify_tagger.core.exceptions import InputError, TaggerError
from oggify_tagger.core.logger import get_logger, log_tagging_failure
from oggify_tagger.download.cover import create_session, fetch_cover
from oggify_tagger.download.writer import write_track
from oggify_tagger.tagging.comments import CommentMerger, CommentStore, MutagenCommentStore, get_comment_store
from oggify_tagger.tagging.models import TrackMetadata
from oggify_tagger.tagging.picture import build_picture_comment
from oggify_tagger.tagging.tags import compose_tag_lines
from oggify_tagger.utils import build_track_filename

logger = get_logger(__name__)


STEP_WRITE_TRACK = "write_track"
STEP_COMPOSE_TAGS = "compose_tags"
STEP_FETCH_COVER = "fetch_cover"
STEP_ENCODE_PICTURE = "encode_picture"
STEP_MERGE_COMMENTS = "merge_comments"

PIPELINE_STEPS = (
    STEP_WRITE_TRACK,
    STEP_COMPOSE_TAGS,
    STEP_FETCH_COVER,
    STEP_ENCODE_PICTURE,
    STEP_MERGE_COMMENTS,
)


@dataclass(frozen=True)
class TagRequest:
    """
    One tagging invocation.

    Attributes:
        source_id: Track identifier at the source, written as SPOTIFY_ID.
        title: Track title.
        album: Album name.
        destination: File to write, given as str or Path and converted to
                     Path once validated. If it is an existing directory,
                     the file is created inside it as "{title} - {artists}.ogg".
        cover_url: URL of the front cover image.
        artists: Artist names in credit order. May be empty.

    Raises:
        InputError: If any value except artists is missing or blank.
    """

    source_id: str
    title: str
    album: str
    destination: Path
    cover_url: str
    artists: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        for name in ("source_id", "title", "album", "destination", "cover_url"):
            value = getattr(self, name)
            if value is None or not str(value).strip():
                raise InputError(
                    f"Missing required value: {name}",
                    details={"field": name}
                )

        object.__setattr__(self, "destination", Path(self.destination))
        object.__setattr__(self, "artists", tuple(self.artists))

    @property
    def metadata(self) -> TrackMetadata:
        return TrackMetadata(
            source_id=self.source_id,
            title=self.title,
            album=self.album,
            artists=self.artists,
        )

    def resolve_destination(self) -> Path:
        """Final file path, deriving the filename when destination is a directory."""
        if self.destination.is_dir():
            return self.destination / build_track_filename(self.title, self.artists)
        return self.destination


@dataclass
class StepResult:
    """
    Outcome of one pipeline step.

    Attributes:
        name: Step name (one of PIPELINE_STEPS).
        ok: True if the step completed.
        value: What the step produced (bytes written, tag lines, image
               bytes, picture comment, final CommentSet). None on failure.
        error: The error that stopped the step, None on success.
    """

    name: str
    ok: bool
    value: Any = None
    error: TaggerError | None = None


@dataclass
class PipelineResult:
    """
    Outcome of a whole pipeline run.

    Attributes:
        destination: Resolved track path.
        steps: Results of the steps that ran, in order. Steps after a
               failure are absent.
        skipped: True if the run was skipped because the file existed.
    """

    destination: Path
    steps: list[StepResult] = field(default_factory=list)
    skipped: bool = False

    @property
    def failed_step(self) -> StepResult | None:
        for step in self.steps:
            if not step.ok:
                return step
        return None

    @property
    def error(self) -> TaggerError | None:
        failed = self.failed_step
        return failed.error if failed else None

    @property
    def succeeded(self) -> bool:
        if self.skipped:
            return True
        return len(self.steps) == len(PIPELINE_STEPS) and self.failed_step is None

    def value(self, step_name: str) -> Any:
        """Value produced by a completed step, or None."""
        for step in self.steps:
            if step.name == step_name and step.ok:
                return step.value
        return None

    def raise_for_failure(self) -> None:
        """Re-raise the error of the failing step, if any."""
        if self.error is not None:
            raise self.error


class TagPipeline:
    """
    Sequential, fail-fast tagging of a single track.

    Attributes:
        merger: CommentMerger wrapping the configured CommentStore.
        session: requests session used for the cover download, or None
                 to let each download use its own session.
        mime_type: MIME type written into the picture block.
        timeout: Cover request timeout in seconds, None for no timeout.
    """

    def __init__(
        self,
        store: CommentStore | None = None,
        session: requests.Session | None = None,
        mime_type: str = DEFAULT_MIME_TYPE,
        timeout: float | None = None
    ) -> None:
        self.merger = CommentMerger(store or MutagenCommentStore())
        self.session = session
        self.mime_type = mime_type
        self.timeout = timeout

    @classmethod
    def from_config(cls, config: Config, session: requests.Session | None = None) -> "TagPipeline":
        """Build a pipeline from configuration."""
        return cls(
            store=get_comment_store(config.comments),
            session=session or create_session(config.cover.user_agent),
            mime_type=config.cover.mime_type,
            timeout=config.cover.timeout,
        )

    def run(
        self,
        request: TagRequest,
        stream: BinaryIO,
        skip_existing: bool = False
    ) -> PipelineResult:
        """
        Write, tag and embed the cover for one track.

        Args:
            request: What to tag and where to write it.
            stream: Raw audio byte stream, consumed until EOF.
            skip_existing: If True and the destination file already exists,
                           do nothing and report the run as skipped.

        Returns:
            PipelineResult with one StepResult per step that ran.

        Raises:
            Only unexpected, non-TaggerError exceptions. Every expected
            failure is reported through the result instead.
        """
        destination = request.resolve_destination()
        result = PipelineResult(destination=destination)

        if skip_existing and destination.exists():
            logger.warning(f"File '{destination}' already exists. Skipping")
            result.skipped = True
            return result

        values: dict[str, Any] = {}

        with ExitStack() as stack:
            steps: tuple[tuple[str, Callable[[], Any]], ...] = (
                (STEP_WRITE_TRACK, lambda: write_track(stream, destination)),
                (STEP_COMPOSE_TAGS, lambda: compose_tag_lines(request.metadata)),
                (STEP_FETCH_COVER, lambda: self._fetch_cover(stack, request.cover_url)),
                (STEP_ENCODE_PICTURE, lambda: build_picture_comment(
                    values[STEP_FETCH_COVER], self.mime_type
                )),
                (STEP_MERGE_COMMENTS, lambda: self.merger.merge(
                    destination, values[STEP_COMPOSE_TAGS], values[STEP_ENCODE_PICTURE]
                )),
            )

            for name, action in steps:
                step = self._run_step(name, action)
                result.steps.append(step)
                if not step.ok:
                    log_tagging_failure(logger, destination, name, str(step.error))
                    return result
                values[name] = step.value

        logger.info(f"Tagged {destination.name}")
        return result

    def _fetch_cover(self, stack: ExitStack, url: str) -> bytes:
        cover_path = stack.enter_context(
            fetch_cover(url, session=self.session, timeout=self.timeout)
        )
        image_bytes = cover_path.read_bytes()
        if not image_bytes:
            logger.warning(f"Cover at {url} is empty, embedding a zero-length picture")
        return image_bytes

    @staticmethod
    def _run_step(name: str, action: Callable[[], Any]) -> StepResult:
        logger.debug(f"Running step {name}")
        try:
            value = action()
        except TaggerError as e:
            return StepResult(name=name, ok=False, error=e)
        return StepResult(name=name, ok=True, value=value)
