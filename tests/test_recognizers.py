import cv2
import numpy as np
import pytest

from card_scanner import recognizers
from card_scanner.entities import NormalizedRegion
from card_scanner.exceptions import TemplateError
from card_scanner.parser import parse
from card_scanner.recognizers import (PaddleRecognizer, TemplateDigitRecognizer,
                                      TesseractRecognizer, load_digit_templates,
                                      rank_candidates)
from tests.fakes import VALID_NUMBER, blank_image


def score_row(**scores):
    row = [0.0] * 10
    for digit, score in scores.items():
        row[int(digit[1:])] = score
    return row


class TestRankCandidates:

    def test_best_reading_then_cheapest_swaps(self):
        rows = [score_row(d1=0.9, d2=0.8), score_row(d5=0.95, d3=0.5)]
        assert rank_candidates(rows, limit=4) == ['15', '25', '13', '05']

    def test_limit_one_is_best_reading_only(self):
        rows = [score_row(d4=0.9), score_row(d5=0.9)]
        assert rank_candidates(rows, limit=1) == ['45']

    def test_default_limit(self):
        rows = [score_row(d7=1.0)] * 4
        readings = rank_candidates(rows)
        assert len(readings) == 10
        assert readings[0] == '7777'
        assert len(set(readings)) == 10


def write_digit_sheet(path, count=10):
    """Light sheet with ``count`` dark blobs left to right."""
    sheet = np.full((100, 600, 3), 255, dtype=np.uint8)
    for i in range(count):
        x = 10 + i * 58
        cv2.rectangle(sheet, (x, 20), (x + 30, 80), (0, 0, 0), -1)
    cv2.imwrite(str(path), sheet)
    return path


class TestTemplates:

    def test_loads_ten_templates(self, tmp_path):
        templates = load_digit_templates(write_digit_sheet(tmp_path / 'ocr_a.png'))
        assert sorted(templates) == list(range(10))
        assert all(t.shape == (88, 57) for t in templates.values())

    def test_missing_sheet(self, tmp_path):
        with pytest.raises(TemplateError):
            load_digit_templates(tmp_path / 'missing.png')

    def test_wrong_digit_count(self, tmp_path):
        with pytest.raises(TemplateError):
            load_digit_templates(write_digit_sheet(tmp_path / 'short.png', count=7))
        with pytest.raises(TemplateError):
            load_digit_templates(write_digit_sheet(tmp_path / 'blank.png', count=0))

    def test_recognizer_needs_ten_templates(self):
        with pytest.raises(TemplateError):
            TemplateDigitRecognizer({i: None for i in range(9)})

    def test_blank_card_has_no_groups(self, tmp_path):
        recognizer = TemplateDigitRecognizer.from_font(write_digit_sheet(tmp_path / 'ocr_a.png'))
        assert recognizer.recognize(blank_image(428, 270)) == []


class TestTesseractRecognizer:

    def test_words_become_fragments(self, monkeypatch):
        data = {
            'text': ['', '4539', '1488', ' ', '0343', '6467'],
            'conf': ['-1', '91', '88.5', '-1', 95, 90],
            'left': [0, 10, 60, 0, 110, 160],
            'top': [0, 20, 20, 0, 20, 20],
            'width': [200, 40, 40, 0, 40, 40],
            'height': [100, 10, 10, 0, 10, 10],
        }
        calls = []

        def fake_image_to_data(image, config, output_type):
            calls.append(config)
            return data

        monkeypatch.setattr(recognizers.pytesseract, 'image_to_data', fake_image_to_data)
        frags = TesseractRecognizer(config='--psm 7').recognize(blank_image(200, 100))

        assert [f.text for f in frags] == ['4539', '1488', '0343', '6467']
        assert frags[0].region == NormalizedRegion.from_pixels(10, 20, 50, 30, 200, 100)
        assert calls == ['--psm 7']

    def test_low_confidence_words_are_dropped(self, monkeypatch):
        data = {'text': ['4539', '1488'], 'conf': [30, 80], 'left': [0, 50],
                'top': [0, 0], 'width': [40, 40], 'height': [10, 10]}
        monkeypatch.setattr(recognizers.pytesseract, 'image_to_data',
                            lambda image, config, output_type: data)
        frags = TesseractRecognizer(min_confidence=50).recognize(blank_image(200, 100))
        assert [f.text for f in frags] == ['1488']


class FakePaddle:
    def __init__(self, result):
        self.result = result

    def ocr(self, image):
        return self.result


class TestPaddleRecognizer:

    def test_legacy_result(self):
        box = [[10, 20], [50, 20], [50, 30], [10, 30]]
        raw = [[[box, ('4539148803436467', 0.98)], [box, ('  ', 0.5)]]]
        frags = PaddleRecognizer(engine=FakePaddle(raw)).recognize(blank_image(200, 100))
        assert [f.text for f in frags] == ['4539148803436467']
        assert frags[0].region == NormalizedRegion.from_pixels(10, 20, 50, 30, 200, 100)

    def test_dict_result(self):
        raw = [{'rec_texts': ['4539', 'VALID THRU'], 'rec_scores': [0.9, 0.8],
                'rec_polys': [np.array([[0, 0], [40, 0], [40, 10], [0, 10]]), None]}]
        frags = PaddleRecognizer(engine=FakePaddle(raw)).recognize(blank_image(200, 100))
        assert [f.text for f in frags] == ['4539', 'VALID', 'THRU']
        assert frags[0].region == NormalizedRegion.from_pixels(0, 0, 40, 10, 200, 100)
        assert frags[1].region is None and frags[2].region is None

    def test_spaced_number_line_becomes_four_groups(self):
        box = [[10, 20], [190, 20], [190, 40], [10, 40]]
        raw = [[[box, ('4539 1488 0343 6467', 0.98)]]]
        frags = PaddleRecognizer(engine=FakePaddle(raw)).recognize(blank_image(200, 100))

        assert [f.text for f in frags] == ['4539', '1488', '0343', '6467']
        line = NormalizedRegion.from_pixels(10, 20, 190, 40, 200, 100)
        assert all(f.region == line for f in frags)
        assert parse(frags) == VALID_NUMBER

    def test_spaced_number_in_rec_texts(self):
        raw = [{'rec_texts': ['JOHN DOE', '4539 1488 0343 6467'], 'rec_scores': [0.9, 0.95],
                'rec_polys': [None, None]}]
        frags = PaddleRecognizer(engine=FakePaddle(raw)).recognize(blank_image(200, 100))
        assert parse(frags) == VALID_NUMBER

    def test_empty_result(self):
        assert PaddleRecognizer(engine=FakePaddle(None)).recognize(blank_image()) == []
        assert PaddleRecognizer(engine=FakePaddle([None])).recognize(blank_image()) == []
