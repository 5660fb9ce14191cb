import csv
from pathlib import Path
from typing import Union

from quadmotion import constants, labels
from quadmotion.logger import Logger
from quadmotion.runtime.motion_controller.models import Feedback

log = Logger().setup_logger('Feedback recorder')


def _header() -> list:
    columns = ['timestamp']
    for prefix in ('position', 'velocity', 'effort'):
        columns.extend(f'{prefix}_{joint}' for joint in range(constants.NUM_JOINTS))
    return columns


class FeedbackRecorder:
    """Writes timestamped feedback samples to a CSV file."""

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self._file = open(self.path, 'w', newline='', encoding='utf-8')
        self._writer = csv.writer(self._file)
        self._writer.writerow(_header())
        self.samples = 0

    def record(self, timestamp: float, feedback: Feedback) -> None:
        row = [f'{timestamp:.6f}']
        for values in (feedback.positions, feedback.velocities, feedback.efforts):
            row.extend(f'{value:.6f}' for value in values)
        self._writer.writerow(row)
        self.samples += 1

    def close(self) -> None:
        if not self._file.closed:
            self._file.close()
            log.info(labels.ACTUATOR_RECORDER_CLOSED.format(self.samples))

    def __enter__(self) -> 'FeedbackRecorder':
        return self

    def __exit__(self, exc_type, exc_value, traceback) -> None:
        self.close()
