from __future__ import annotations

from unittest.mock import Mock, patch

from tariff_refdata.services.progress import RowProgress, is_tty_enabled


def test_is_tty_enabled_returns_stdout_isatty():
    with patch("sys.stdout.isatty", return_value=True):
        assert is_tty_enabled() is True
    with patch("sys.stdout.isatty", return_value=False):
        assert is_tty_enabled() is False


def test_bar_created_on_tty():
    with patch("tariff_refdata.services.progress.is_tty_enabled", return_value=True), \
         patch("tariff_refdata.services.progress.tqdm") as mock_tqdm:
        progress = RowProgress(10, description="Building voc rows")
        assert progress.enabled is True
        mock_tqdm.assert_called_once_with(
            total=10,
            desc="Building voc rows",
            unit="row",
            leave=False,
            ncols=80,
            ascii=True,
            mininterval=0.5,
        )


def test_no_bar_without_tty():
    with patch("tariff_refdata.services.progress.is_tty_enabled", return_value=False):
        progress = RowProgress(10)
        assert progress.enabled is False
        assert progress.pbar is None
        progress.advance()
        progress.set_postfix(valid=1)
        assert progress.processed == 1


def test_no_bar_for_empty_sheet():
    with patch("tariff_refdata.services.progress.is_tty_enabled", return_value=True), \
         patch("tariff_refdata.services.progress.tqdm") as mock_tqdm:
        assert RowProgress(0).pbar is None
        mock_tqdm.assert_not_called()


def test_context_manager_updates_and_closes():
    mock_pbar = Mock()
    with patch("tariff_refdata.services.progress.is_tty_enabled", return_value=True), \
         patch("tariff_refdata.services.progress.tqdm", return_value=mock_pbar):
        with RowProgress(3) as progress:
            progress.advance()
            progress.advance(2)
            progress.set_postfix(valid=3, skipped=0)
        assert mock_pbar.update.call_count == 2
        mock_pbar.set_postfix.assert_called_once_with(valid=3, skipped=0)
        mock_pbar.close.assert_called_once()
        assert progress.pbar is None
