"""Best-effort conversion of image, audio and file inputs into text context.

Each conversion is isolated: a failure produces a degraded ``ProcessedMedia``
record instead of an exception, so one bad attachment never aborts a request.
"""

from __future__ import annotations

import base64
import binascii
import json

from cod_engine.exceptions import MediaProcessingError, ParseWarning
from cod_engine.generation.prompt_templates import IMAGE_ANALYSIS_PROMPT
from cod_engine.models.domain import (
    ChatMessage,
    ImagePart,
    MediaInput,
    MediaMetadata,
    ProcessedMedia,
    SamplingParams,
    TextPart,
)
from cod_engine.observability.logger import get_logger
from cod_engine.protocols.llm import ModelClient

logger = get_logger("media")

VISION_UNAVAILABLE = "Vision analysis temporarily unavailable. Image uploaded but not analyzed."
AUDIO_PLACEHOLDER_TEXT = "Audio transcription would be performed here"
AUDIO_PLACEHOLDER_ANALYSIS = "Audio analysis including speech recognition and sound classification"
PDF_NOT_IMPLEMENTED_TEXT = "PDF content extraction not implemented"
PDF_NOT_IMPLEMENTED_ANALYSIS = "PDF processing requires an additional PDF extraction library"


def _metadata(media: MediaInput) -> MediaMetadata:
    return MediaMetadata(type=media.type, format=media.mime_type, size=media.size)


def _name(media: MediaInput) -> str:
    return media.filename or "untitled"


def to_data_url(media: MediaInput) -> str:
    if media.data.startswith("data:"):
        return media.data
    return f"data:{media.mime_type};base64,{media.data}"


def decode_payload(data: str) -> str:
    """Decode a base64 (or base64 data URL) payload to text."""
    if data.startswith("data:"):
        data = data.split(",", 1)[-1]
    try:
        return base64.b64decode(data, validate=True).decode("utf-8")
    except (binascii.Error, UnicodeDecodeError) as e:
        raise ParseWarning(f"Could not decode payload: {e}") from e


def pretty_json(text: str) -> str:
    try:
        return json.dumps(json.loads(text), indent=2)
    except json.JSONDecodeError as e:
        raise ParseWarning(f"Malformed JSON: {e}") from e


class MediaProcessor:
    def __init__(
        self,
        llm: ModelClient,
        vision_model: str,
        vision_params: SamplingParams | None = None,
    ) -> None:
        self._llm = llm
        self._vision_model = vision_model
        self._vision_params = vision_params or SamplingParams(temperature=0.3, max_tokens=1000)

    async def process_image(self, media: MediaInput) -> ProcessedMedia:
        if media.type != "image":
            raise MediaProcessingError("Input must be an image")

        description = f"Image file: {_name(media)} ({media.mime_type})"
        messages = [
            ChatMessage(
                role="user",
                content=[
                    TextPart(IMAGE_ANALYSIS_PROMPT),
                    ImagePart(data_url=to_data_url(media), mime_type=media.mime_type),
                ],
            )
        ]
        try:
            analysis = await self._llm.generate_text(
                messages, self._vision_params, self._vision_model
            )
        except Exception as e:
            logger.warning("vision_analysis_failed", filename=_name(media), error=str(e))
            return ProcessedMedia(
                description=description,
                metadata=_metadata(media),
                extracted_text=f"[Image: {_name(media)}]",
                analysis=VISION_UNAVAILABLE,
                failed=True,
            )

        return ProcessedMedia(
            description=description,
            metadata=_metadata(media),
            extracted_text=analysis,
            analysis=analysis,
        )

    def process_audio(self, media: MediaInput) -> ProcessedMedia:
        if media.type != "audio":
            raise MediaProcessingError("Input must be audio")
        return ProcessedMedia(
            description=f"Audio file: {_name(media)} ({media.mime_type})",
            metadata=_metadata(media),
            extracted_text=AUDIO_PLACEHOLDER_TEXT,
            analysis=AUDIO_PLACEHOLDER_ANALYSIS,
        )

    def process_file(self, media: MediaInput) -> ProcessedMedia:
        if media.type != "file":
            raise MediaProcessingError("Input must be a file")

        mime = media.mime_type
        extracted = ""
        if "text/" in mime:
            try:
                extracted = decode_payload(media.data)
                analysis = "Text content extracted and ready for Chain of Draft analysis"
            except ParseWarning as w:
                logger.warning("parse_warning", filename=_name(media), detail=str(w))
                analysis = "Error processing text file"
        elif "application/json" in mime:
            try:
                extracted = pretty_json(decode_payload(media.data))
                analysis = "JSON structure parsed and formatted for analysis"
            except ParseWarning as w:
                logger.warning("parse_warning", filename=_name(media), detail=str(w))
                analysis = "Error parsing JSON file"
        elif "application/pdf" in mime:
            extracted = PDF_NOT_IMPLEMENTED_TEXT
            analysis = PDF_NOT_IMPLEMENTED_ANALYSIS
        else:
            analysis = f"File type {mime} detected. Specialized processing may be required."

        return ProcessedMedia(
            description=f"File: {_name(media)} ({mime})",
            metadata=_metadata(media),
            extracted_text=extracted,
            analysis=analysis,
        )

    async def process_one(self, media: MediaInput) -> ProcessedMedia:
        if media.type == "image":
            return await self.process_image(media)
        if media.type == "audio":
            return self.process_audio(media)
        if media.type == "file":
            return self.process_file(media)
        raise MediaProcessingError(f"Unsupported media type: {media.type}")

    async def process_all(self, inputs: list[MediaInput]) -> list[ProcessedMedia]:
        """Process inputs in order, one record per input."""
        processed: list[ProcessedMedia] = []
        for media in inputs:
            try:
                processed.append(await self.process_one(media))
            except Exception as e:
                logger.warning(
                    "media_processing_failed",
                    type=media.type,
                    filename=_name(media),
                    error=str(e),
                )
                processed.append(
                    ProcessedMedia(
                        description=f"Error processing {media.type}: {_name(media)}",
                        metadata=_metadata(media),
                        analysis=f"Processing failed: {e}",
                        failed=True,
                    )
                )
        if processed:
            logger.info(
                "media_processed",
                count=len(processed),
                failed=sum(1 for p in processed if p.failed),
            )
        return processed
