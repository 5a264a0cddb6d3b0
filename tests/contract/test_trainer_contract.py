import pytest

from mlpnet.core.vector import Vector
from mlpnet.training.trainer import Trainer

SAMPLES = [([0.0, 0.0], [0.0]), ([0.0, 1.0], [1.0]), ([1.0, 0.0], [1.0]), ([1.0, 1.0], [0.0])]


class _Recorder:
    """Minimal trainable model recording what it was shown."""

    def __init__(self):
        self.seen = []

    def set_input(self, inputs):
        self.current = list(inputs)

    def back_propagate(self, target):
        self.seen.append((self.current, list(target)))


def _constant(value):
    return lambda model, target: value


def test_runs_full_budget_without_convergence():
    model = _Recorder()
    trainer = Trainer(model, epochs=3)
    assert trainer.run_training(SAMPLES, _constant(1.0)) == 3
    assert len(model.seen) == 12
    assert [inputs for inputs, _ in model.seen[:4]] == [s[0] for s in SAMPLES]
    assert trainer.error == 1.0


def test_convergence_returns_current_epoch():
    model = _Recorder()
    errors = iter([0.5] * 9 + [0.001])
    trainer = Trainer(model, epochs=10, min_error=0.01)
    assert trainer.run_training(SAMPLES, lambda m, t: next(errors)) == 2
    assert len(model.seen) == 10


def test_negative_min_error_disables_early_stop():
    trainer = Trainer(_Recorder(), epochs=2, min_error=-1.0)
    assert trainer.run_training(SAMPLES, _constant(0.0)) == 2


def test_callback_abort_happens_before_the_sample():
    model = _Recorder()
    calls = []

    def progress(net, inputs, target, epoch, index, last_error):
        assert net is model
        assert isinstance(inputs, Vector)
        calls.append((epoch, index))
        return epoch == 1 and index == 2

    trainer = Trainer(model, epochs=5)
    assert trainer.run_training(SAMPLES, _constant(1.0), progress=progress) == 1
    assert calls[-1] == (1, 2)
    assert len(model.seen) == 4 + 2


def test_fraction_truncates_every_epoch():
    model = _Recorder()
    trainer = Trainer(model, epochs=3)
    assert trainer.run_training(SAMPLES, _constant(1.0), fraction=0.5) == 3
    assert len(model.seen) == 6
    assert {tuple(inputs) for inputs, _ in model.seen} == {(0.0, 0.0), (0.0, 1.0)}


def test_mapping_training_set_and_epoch_callbacks():
    model = _Recorder()
    history = []

    class _Sink:
        def on_epoch(self, epoch, metrics):
            history.append((epoch, metrics["error"]))

    trainer = Trainer(model, epochs=2, callbacks=[_Sink(), lambda e, m: history.append(e)])
    table = {(0.0, 1.0): [1.0], (1.0, 1.0): [0.0]}
    trainer.run_training(table, _constant(0.25))
    assert history == [(0, 0.25), 0, (1, 0.25), 1]
    assert model.seen[1] == ([1.0, 1.0], [0.0])


def test_train_reports_threshold_and_iteration():
    trainer = Trainer(_Recorder(), epochs=4, min_error=0.1)
    assert trainer.train([0.0, 0.0], [0.0], _constant(0.05)) is True
    assert trainer.train([0.0, 0.0], [0.0], _constant(0.5)) is False
    assert list(trainer) == [0, 1, 2, 3]
    assert trainer.epochs == 4
    assert trainer.min_error == 0.1


def test_negative_epochs_rejected():
    with pytest.raises(ValueError):
        Trainer(_Recorder(), epochs=-1)
