# intrafiles/client/preview.py
from dataclasses import dataclass
from enum import Enum
from typing import Optional


class FileKind(Enum):
    IMAGE = 'image'
    PDF = 'pdf'
    VIDEO = 'video'
    AUDIO = 'audio'
    TEXT = 'text'
    OTHER = 'other'


class PreviewWidget(Enum):
    IMAGE_TAG = 'image-tag'
    EMBEDDED_FRAME = 'embedded-frame'
    VIDEO_PLAYER = 'video-player'
    AUDIO_PLAYER = 'audio-player'
    NO_PREVIEW = 'no-preview'


EXTENSIONS = {
    FileKind.IMAGE: frozenset({'jpg', 'jpeg', 'png', 'gif', 'bmp', 'webp', 'svg'}),
    FileKind.PDF: frozenset({'pdf'}),
    FileKind.VIDEO: frozenset({'mp4', 'webm', 'ogg', 'mov', 'avi', 'mkv'}),
    FileKind.AUDIO: frozenset({'mp3', 'wav', 'm4a', 'aac', 'flac', 'oga'}),
    FileKind.TEXT: frozenset({'txt', 'md', 'csv', 'json', 'xml', 'log', 'html', 'css', 'js'}),
}

WIDGETS = {
    FileKind.IMAGE: PreviewWidget.IMAGE_TAG,
    FileKind.PDF: PreviewWidget.EMBEDDED_FRAME,
    FileKind.VIDEO: PreviewWidget.VIDEO_PLAYER,
    FileKind.AUDIO: PreviewWidget.AUDIO_PLAYER,
    FileKind.TEXT: PreviewWidget.EMBEDDED_FRAME,
    FileKind.OTHER: PreviewWidget.NO_PREVIEW,
}


def classify(extension):
    """Kind of a file from its extension alone; anything unknown is OTHER."""
    ext = (extension or '').strip().lower().lstrip('.')
    for kind, members in EXTENSIONS.items():
        if ext in members:
            return kind
    return FileKind.OTHER


@dataclass(frozen=True)
class Preview:
    kind: FileKind
    widget: PreviewWidget
    url: Optional[str]
    download_url: str

    @property
    def offers_download(self):
        return self.widget is PreviewWidget.NO_PREVIEW


def preview_for(file, api, user_id=None):
    kind = classify(file.get('file_type'))
    widget = WIDGETS[kind]
    url = api.download_url(file['id'], preview=True) if widget is not PreviewWidget.NO_PREVIEW else None
    return Preview(kind, widget, url, api.download_url(file['id'], user_id=user_id))
