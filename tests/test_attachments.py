from io import BytesIO

import pytest
from django.core.files.storage import default_storage
from django.core.files.uploadedfile import SimpleUploadedFile
from PIL import Image

from apps.board.models import Attachment
from apps.board.placement import placement_manager
from apps.board.storage import generate_storage_key, inline_image_key, make_thumbnail


def png_bytes(width, height, color=(200, 30, 30, 255)):
    output = BytesIO()
    Image.new('RGBA', (width, height), color).save(output, format='PNG')
    return output.getvalue()


def upload(name, data, content_type):
    return SimpleUploadedFile(name, data, content_type=content_type)


@pytest.fixture
def task(make_task):
    return make_task('With files')


def attachments_url(board, task):
    return f'/api/boards/{board.id}/tasks/{task.id}/attachments/'


class TestStorageHelpers:

    def test_storage_key_keeps_extension(self):
        key = generate_storage_key('Report.PDF')

        millis, rest = key.split('-', 1)
        assert millis.isdigit()
        assert rest.endswith('.pdf')
        assert len(rest) == 32 + len('.pdf')

    def test_inline_key_is_sanitized(self):
        key = inline_image_key(7, 'my photo (1).png')

        assert key.startswith('accounts/7/images/')
        assert key.endswith('-my_photo__1_.png')

    def test_thumbnail_is_200_wide_jpeg(self):
        thumb = make_thumbnail(png_bytes(800, 400), 'image/png')

        with Image.open(BytesIO(thumb.read())) as img:
            assert img.format == 'JPEG'
            assert img.size == (200, 100)

    def test_thumbnail_never_upscales(self):
        thumb = make_thumbnail(png_bytes(120, 60), 'image/png')

        with Image.open(BytesIO(thumb.read())) as img:
            assert img.size == (120, 60)

    def test_no_thumbnail_for_other_files(self):
        assert make_thumbnail(b'%PDF-1.4', 'application/pdf') is None

    def test_undecodable_image(self):
        assert make_thumbnail(b'not really a png', 'image/png') is None


class TestUpload:

    def test_upload_document(self, api, board, task, user):
        response = api.upload(
            attachments_url(board, task),
            file=upload('notes.txt', b'hello', 'text/plain'),
        )

        assert response.status_code == 201
        data = response.json()['attachment']
        assert data['original_filename'] == 'notes.txt'
        assert data['mime_type'] == 'text/plain'
        assert data['size_bytes'] == 5
        assert data['storage_key'].startswith('attachments/')
        assert data['thumbnail_key'] is None
        assert data['uploader']['id'] == user.id
        assert default_storage.open(data['storage_key']).read() == b'hello'

    def test_upload_image_gets_thumbnail(self, api, board, task):
        response = api.upload(
            attachments_url(board, task),
            file=upload('shot.png', png_bytes(400, 300), 'image/png'),
        )

        data = response.json()['attachment']
        assert data['thumbnail_key'].startswith('attachments/thumbs/')
        assert data['thumbnail_url']
        with default_storage.open(data['thumbnail_key']) as fh:
            with Image.open(fh) as img:
                assert img.size == (200, 150)

    def test_upload_bound_to_comment(self, api, board, task, user):
        comment = task.comments.create(author=user, body='see file')

        response = api.upload(
            attachments_url(board, task),
            file=upload('log.txt', b'boom', 'text/plain'),
            comment_id=str(comment.id),
        )

        assert response.json()['attachment']['comment_id'] == comment.id

    def test_upload_unknown_comment(self, api, board, task):
        response = api.upload(
            attachments_url(board, task),
            file=upload('log.txt', b'boom', 'text/plain'),
            comment_id='9999',
        )

        assert response.status_code == 404

    def test_no_file(self, api, board, task):
        response = api.upload(attachments_url(board, task))

        assert response.status_code == 400
        assert response.json()['error'] == 'No file uploaded'

    def test_too_large(self, api, board, task, settings):
        settings.KANBAN_ATTACHMENT_MAX_BYTES = 4

        response = api.upload(
            attachments_url(board, task),
            file=upload('big.bin', b'12345', 'application/octet-stream'),
        )

        assert response.status_code == 413
        assert response.json()['code'] == 'file_too_large'
        assert not Attachment.objects.exists()

    def test_list(self, api, board, task):
        for name in ('a.txt', 'b.txt'):
            api.upload(attachments_url(board, task), file=upload(name, b'x', 'text/plain'))

        response = api.get(attachments_url(board, task))

        assert [a['original_filename'] for a in response.json()['attachments']] == ['a.txt', 'b.txt']


class TestAttachmentDetail:

    @pytest.fixture
    def attachment(self, api, board, task):
        response = api.upload(
            attachments_url(board, task),
            file=upload('pic.png', png_bytes(300, 300), 'image/png'),
        )
        return Attachment.objects.get(id=response.json()['attachment']['id'])

    def test_get(self, api, board, attachment):
        response = api.get(f'/api/boards/{board.id}/attachments/{attachment.id}/')

        data = response.json()['attachment']
        assert data['id'] == attachment.id
        assert data['download_url'].endswith(attachment.file.name)

    def test_view_redirects_to_blob(self, api, board, attachment):
        response = api.get(f'/api/boards/{board.id}/attachments/{attachment.id}/view/')

        assert response.status_code == 302
        assert response['Location'] == attachment.file.url

    def test_other_board_cannot_see_it(self, board, other_board, other_user, attachment):
        from django.test import Client

        client = Client()
        client.force_login(other_user)

        response = client.get(f'/api/boards/{other_board.id}/attachments/{attachment.id}/')

        assert response.status_code == 404

    def test_delete_removes_blobs_after_commit(
        self, api, board, attachment, django_capture_on_commit_callbacks
    ):
        names = [attachment.file.name, attachment.thumbnail.name]

        with django_capture_on_commit_callbacks(execute=True):
            response = api.delete(f'/api/boards/{board.id}/attachments/{attachment.id}/')

        assert response.status_code == 204
        assert not Attachment.objects.filter(id=attachment.id).exists()
        assert not any(default_storage.exists(name) for name in names)

    def test_deleting_task_removes_blobs(
        self, board, task, attachment, django_capture_on_commit_callbacks
    ):
        name = attachment.file.name

        with django_capture_on_commit_callbacks(execute=True):
            placement_manager.remove(task)

        assert not default_storage.exists(name)


class TestInlineImages:

    def test_inline_image(self, api, board):
        response = api.upload(
            f'/api/boards/{board.id}/attachments/inline/',
            file=upload('diagram.png', png_bytes(10, 10), 'image/png'),
        )

        assert response.status_code == 201
        data = response.json()
        assert data['storage_key'].startswith(f'accounts/{board.account_id}/images/')
        assert data['filename'] == 'diagram.png'
        assert default_storage.exists(data['storage_key'])

    def test_inline_rejects_non_images(self, api, board):
        response = api.upload(
            f'/api/boards/{board.id}/attachments/inline/',
            file=upload('notes.txt', b'hi', 'text/plain'),
        )

        assert response.status_code == 400
        assert response.json()['error'] == 'Only image files are allowed for inline uploads'
