"""Tests for upload mode selection, the upload orchestrator and preview dispatch."""

import io

import pytest

from fakes import FakeApi
from intrafiles.client.preview import FileKind, PreviewWidget, WIDGETS, classify, preview_for
from intrafiles.client.upload import UploadMode, UploadOrchestrator, select_upload_mode


def parts(*names):
    return [(name, io.BytesIO(name.encode())) for name in names]


class TestUploadMode:
    """Tests for choosing the endpoint from the file count."""

    @pytest.mark.parametrize('count, mode', [
        (1, UploadMode.SINGLE),
        (2, UploadMode.MULTIPLE),
        (5, UploadMode.MULTIPLE),
        (6, UploadMode.BULK),
        (250, UploadMode.BULK),
    ])
    def test_thresholds(self, count, mode):
        assert select_upload_mode(count) is mode

    def test_zero_files(self):
        with pytest.raises(ValueError):
            select_upload_mode(0)

    def test_endpoints_and_fields(self):
        """Test single uses 'file', the others share 'files'."""
        assert (UploadMode.SINGLE.endpoint, UploadMode.SINGLE.field) == ('/api/files/upload-single', 'file')
        assert (UploadMode.MULTIPLE.endpoint, UploadMode.MULTIPLE.field) == ('/api/files/upload-multiple', 'files')
        assert (UploadMode.BULK.endpoint, UploadMode.BULK.field) == ('/api/files/bulk-upload', 'files')


class TestUploadOrchestrator:
    """Tests for submitting a selection."""

    def test_three_files_one_multiple_request(self):
        """Test three files go in exactly one POST to upload-multiple."""
        api = FakeApi()
        uploader = UploadOrchestrator(api)
        uploader.select_files(parts('a.txt', 'b.txt', 'c.txt'))

        uploader.submit(category_id=5, created_by=1)

        uploads = api.calls_to('upload')
        assert len(uploads) == 1
        assert uploads[0]['endpoint'] == '/api/files/upload-multiple'
        assert uploads[0]['field'] == 'files'
        assert uploads[0]['names'] == ['a.txt', 'b.txt', 'c.txt']
        assert uploads[0]['data'] == {'category_id': 5, 'created_by': 1}
        assert [(p.progress, p.status) for p in uploader.progress] == [(100, 'completed')] * 3

    def test_drop_reevaluates_mode(self):
        """Test a drag-drop after a picker selection picks its own mode."""
        uploader = UploadOrchestrator(FakeApi())

        assert uploader.select_files(parts('a.txt')) is UploadMode.SINGLE
        assert uploader.drop_files(parts(*[f'{i}.txt' for i in range(7)])) is UploadMode.BULK

    def test_paths_are_opened_and_sent(self, tmp_path):
        """Test files given by path are read and sent under their base name."""
        path = tmp_path / 'notes.txt'
        path.write_bytes(b'remember')
        api = FakeApi()
        uploader = UploadOrchestrator(api)
        uploader.select_files([str(path)])

        uploader.submit(category_id=5, folder_id=12)

        call = api.calls_to('upload')[0]
        assert call['endpoint'] == '/api/files/upload-single'
        assert call['names'] == ['notes.txt']
        assert call['contents'] == [b'remember']
        assert call['data'] == {'category_id': 5, 'folder_id': 12}

    def test_request_failure_marks_every_file(self):
        """Test a failed request flags all files and sets one message."""
        api = FakeApi()
        api.fail.add('upload')
        uploader = UploadOrchestrator(api)
        uploader.select_files(parts('a.txt', 'b.txt'))

        assert uploader.submit(category_id=5) is None
        assert uploader.error == 'upload failed'
        assert {p.status for p in uploader.progress} == {'error'}
        assert {p.progress for p in uploader.progress} == {0}

    def test_rejected_files_in_reply(self):
        """Test files the server rejected are flagged, the rest complete."""
        api = FakeApi()
        api.upload_response = {'results': {'errors': [{'filename': 'b.exe', 'error': 'nope'}]}}
        uploader = UploadOrchestrator(api)
        uploader.select_files(parts('a.txt', 'b.exe', 'c.txt', 'd.txt', 'e.txt', 'f.txt'))

        uploader.submit(category_id=5)

        status = {p.file_name: p.status for p in uploader.progress}
        assert status['b.exe'] == 'error'
        assert status['a.txt'] == 'completed'

    def test_skipped_duplicates_are_not_completed(self):
        """Test files a bulk upload skipped are marked skipped, not uploaded."""
        names = [f'f{i}.txt' for i in range(6)]
        api = FakeApi()
        api.upload_response = {'results': {
            'uploaded': [{'original_name': 'f0.txt'}],
            'skipped': [{'filename': n, 'reason': 'File already exists'} for n in names[1:]],
            'errors': [],
            'total': 6,
        }}
        uploader = UploadOrchestrator(api)
        uploader.select_files(parts(*names))

        uploader.submit(category_id=5)

        assert [(p.file_name, p.status, p.progress) for p in uploader.progress] == (
            [('f0.txt', 'completed', 100)] + [(n, 'skipped', 0) for n in names[1:]]
        )

    def test_picker_then_drop_uses_latest_selection(self):
        """Test a drop replaces the picked files and the submit follows its mode."""
        api = FakeApi()
        uploader = UploadOrchestrator(api)
        uploader.select_files(parts('a.txt', 'b.txt'))
        assert uploader.mode is UploadMode.MULTIPLE

        uploader.drop_files(parts('c.txt'))
        uploader.submit(category_id=5)

        call = api.calls_to('upload')[0]
        assert (call['endpoint'], call['field'], call['names']) == ('/api/files/upload-single', 'file', ['c.txt'])

        uploader.select_files(parts(*[f'{i}.txt' for i in range(6)]))
        uploader.submit(category_id=5)

        assert api.calls_to('upload')[1]['endpoint'] == '/api/files/bulk-upload'
        assert len(api.calls_to('upload')) == 2

    def test_submit_without_selection(self):
        with pytest.raises(ValueError):
            UploadOrchestrator(FakeApi()).submit(category_id=5)


class TestPreview:
    """Tests for classifying extensions and choosing preview widgets."""

    @pytest.mark.parametrize('extension, kind', [
        ('png', FileKind.IMAGE),
        ('.JPG', FileKind.IMAGE),
        ('pdf', FileKind.PDF),
        ('mp4', FileKind.VIDEO),
        ('mp3', FileKind.AUDIO),
        ('txt', FileKind.TEXT),
        ('docx', FileKind.OTHER),
        ('', FileKind.OTHER),
        (None, FileKind.OTHER),
    ])
    def test_classify(self, extension, kind):
        assert classify(extension) is kind

    def test_every_kind_has_a_widget(self):
        assert set(WIDGETS) == set(FileKind)

    def test_pdf_preview_is_embedded(self):
        """Test a PDF renders in a frame fed by the inline preview URL."""
        preview = preview_for({'id': 40, 'file_type': 'pdf', 'mime_type': 'image/png'}, FakeApi())

        assert preview.kind is FileKind.PDF
        assert preview.widget is PreviewWidget.EMBEDDED_FRAME
        assert preview.url.endswith('/api/files/40/download?preview=true')
        assert preview.offers_download is False

    def test_other_offers_forced_download(self):
        """Test unknown types get no preview and a download link instead."""
        preview = preview_for({'id': 41, 'file_type': 'xlsx'}, FakeApi(), user_id=3)

        assert preview.widget is PreviewWidget.NO_PREVIEW
        assert preview.url is None
        assert preview.offers_download is True
        assert preview.download_url.endswith('/api/files/41/download?user_id=3')
