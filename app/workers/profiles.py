"""
Generation Profiles
Per content type: the JSON schema described to the model, how the user
message is phrased, which request field carries the prompt, and the
progress checkpoints reported along the way.
"""

from dataclasses import dataclass
from typing import Any, Dict, Mapping, Tuple

from app.schemas.project import ProjectType
from app.workers.base import PromptBuildError


@dataclass(frozen=True)
class GenerationProfile:
    """How one content type is turned into a single model call."""
    type: ProjectType
    prompt_field: str
    system_prompt: str
    user_template: str
    start_progress: int
    checkpoint_progress: int
    
    def build_user_prompt(self, inputs: Mapping[str, Any]) -> str:
        """Fill the user template from the request inputs."""
        values = dict(inputs)
        if not values.get(self.prompt_field):
            raise PromptBuildError(f"Missing required field '{self.prompt_field}'")
        enhancement = values.get("audio_enhancement")
        values["audio_enhancement"] = ", ".join(enhancement) if enhancement else "standard"
        try:
            return self.user_template.format(**values)
        except KeyError as e:
            raise PromptBuildError(f"Missing prompt input {e}") from e


MOVIE_SYSTEM_PROMPT = """You are a professional film production AI. Create a comprehensive movie production plan with scene breakdown, cinematography notes, and technical specifications. Respond with JSON in this format:
{
  "scenes": [{"id": "scene_1", "description": "...", "duration": 120, "visualElements": ["..."], "audioElements": ["..."]}],
  "productionNotes": {"cinematography": "...", "visualEffects": ["..."], "audioSpecs": "...", "exportSettings": {}},
  "timeline": [{"timestamp": 0, "event": "...", "description": "..."}],
  "metadata": {"totalDuration": "...", "sceneCount": 0, "quality": "...", "genre": "..."}
}"""

MUSIC_SYSTEM_PROMPT = """You are a professional music producer. Create a comprehensive music production plan with arrangement, instrumentation, and technical specifications. Respond with JSON in this format:
{
  "arrangement": {"intro": "...", "verse": "...", "chorus": "...", "bridge": "...", "outro": "..."},
  "instrumentation": ["...", "...", "..."],
  "production": {"tempo": 0, "key": "...", "timeSignature": "...", "genre": "...", "style": "..."},
  "timeline": [{"timestamp": 0, "element": "...", "description": "..."}],
  "metadata": {"duration": "...", "genre": "...", "style": "...", "complexity": "..."}
}"""

VOICE_SYSTEM_PROMPT = """You are a professional voice synthesis director. Create a comprehensive voice production plan with timing, emphasis, and technical specifications. Respond with JSON in this format:
{
  "segments": [{"text": "...", "timing": 0, "emphasis": "...", "pause": 0}],
  "voiceSettings": {"voice": "...", "style": "...", "speed": 0, "pitch": "...", "tone": "..."},
  "production": {"totalDuration": "...", "segmentCount": 0, "quality": "..."},
  "metadata": {"wordCount": 0, "estimatedDuration": "...", "complexity": "..."}
}"""

ANALYSIS_SYSTEM_PROMPT = """You are a professional content analyst. Analyze the provided content and give detailed insights and recommendations. Respond with JSON in this format:
{
  "analysis": {"summary": "...", "keyPoints": ["...", "..."], "strengths": ["...", "..."], "weaknesses": ["...", "..."]},
  "metrics": {"readability": 0, "engagement": 0, "sentiment": 0, "complexity": 0},
  "recommendations": [{"category": "...", "suggestion": "...", "priority": "..."}],
  "metadata": {"analysisType": "...", "contentLength": 0, "processingTime": "..."}
}"""

# (prompt field, system prompt, user template)
_TEMPLATES: Dict[ProjectType, Tuple[str, str, str]] = {
    ProjectType.MOVIE: (
        "script",
        MOVIE_SYSTEM_PROMPT,
        "Create a {quality} quality {genre} movie from this script ({duration} duration): "
        "{script}. Include {audio_enhancement} audio enhancement.",
    ),
    ProjectType.MUSIC: (
        "lyrics",
        MUSIC_SYSTEM_PROMPT,
        "Create a {genre} {style} song with these lyrics ({duration} duration): {lyrics}",
    ),
    ProjectType.VOICE: (
        "text",
        VOICE_SYSTEM_PROMPT,
        "Create voice synthesis for this text with {voice} voice in {style} style "
        "at {speed}x speed: {text}",
    ),
    ProjectType.ANALYSIS: (
        "content",
        ANALYSIS_SYSTEM_PROMPT,
        "Perform {analysis_type} analysis on this content: {content}",
    ),
}


def build_profiles(checkpoints: Mapping[str, Tuple[int, int]]) -> Dict[ProjectType, GenerationProfile]:
    """Profiles for every content type, with progress checkpoints from settings."""
    profiles = {}
    for kind, (field, system_prompt, user_template) in _TEMPLATES.items():
        start, checkpoint = checkpoints[kind.value]
        profiles[kind] = GenerationProfile(
            type=kind,
            prompt_field=field,
            system_prompt=system_prompt,
            user_template=user_template,
            start_progress=start,
            checkpoint_progress=checkpoint,
        )
    return profiles
