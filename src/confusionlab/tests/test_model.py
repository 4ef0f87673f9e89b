import numpy as np
import pytest
from sklearn.linear_model import LogisticRegression
from sklearn.svm import SVC

from confusionlab.datasets.base import LabeledDataset
from confusionlab.datasets.blobs import make_blobs_dataset
from confusionlab.model import ClassifierState, fit_classifier, make_estimator, predict


@pytest.fixture
def separable() -> LabeledDataset:
    return make_blobs_dataset(120, [(-4, -4), (4, 4), (4, -4)], 0.5, random_seed=0)


# --------- make_estimator ---------

def test_make_estimator_default_is_linear_svc():
    est = make_estimator()
    assert isinstance(est, SVC)
    assert est.get_params()["kernel"] == "linear"


def test_make_estimator_from_spec():
    est = make_estimator({"class": "sklearn.linear_model.LogisticRegression", "params": {"max_iter": 50}})
    assert isinstance(est, LogisticRegression) and est.max_iter == 50


def test_make_estimator_clones_instances():
    given = SVC(kernel="linear", C=2.0)
    est = make_estimator(given)
    assert est is not given and est.get_params()["C"] == 2.0


def test_make_estimator_bad_spec_raises():
    with pytest.raises(TypeError):
        make_estimator("sklearn.svm.SVC")
    with pytest.raises(ModuleNotFoundError):
        make_estimator({"class": "no_such_mod.Cls"})


# --------- fit_classifier ---------

def test_fit_returns_state_with_support_vectors(separable: LabeledDataset):
    state = fit_classifier(separable)
    assert isinstance(state, ClassifierState)
    assert state.classes == (0, 1, 2)
    assert state.n_features == 2
    assert state.support_vectors is not None and state.support_vectors.shape[1] == 2
    assert len(state.n_support) == 3


def test_fit_does_not_mutate_inputs(separable: LabeledDataset):
    X_before = separable.features.copy()
    y_before = separable.labels.copy()
    given = SVC(kernel="linear")
    fit_classifier(separable, given)
    assert np.array_equal(separable.features, X_before)
    assert np.array_equal(separable.labels, y_before)
    assert not hasattr(given, "support_vectors_")  # caller's estimator stays unfitted


def test_fit_state_is_frozen(separable: LabeledDataset):
    state = fit_classifier(separable)
    with pytest.raises(AttributeError):
        state.n_features = 3  # type: ignore[misc]


def test_fit_forwards_random_state_when_unset(separable: LabeledDataset):
    state = fit_classifier(separable, random_state=11)
    assert state.estimator.get_params()["random_state"] == 11
    pinned = fit_classifier(separable, SVC(kernel="linear", random_state=3), random_state=11)
    assert pinned.estimator.get_params()["random_state"] == 3


def test_fit_requires_two_labels():
    ds = LabeledDataset(np.random.default_rng(0).normal(size=(10, 2)), np.zeros(10, dtype=int), label_set=(0, 1))
    with pytest.raises(ValueError, match="at least 2 distinct labels"):
        fit_classifier(ds)


# --------- predict ---------

def test_predict_single_and_batch(separable: LabeledDataset):
    state = fit_classifier(separable)
    assert predict(state, [4.0, 4.0]) == 1
    assert isinstance(predict(state, np.array([-4.0, -4.0])), int)
    batch = predict(state, [[-4, -4], [4, 4], [4, -4]])
    assert batch.tolist() == [0, 1, 2]
    assert batch.dtype == np.int64


def test_predict_rejects_wrong_dimension(separable: LabeledDataset):
    state = fit_classifier(separable)
    with pytest.raises(ValueError, match="2 columns"):
        predict(state, [1.0, 2.0, 3.0])
    with pytest.raises(ValueError, match="1-D or 2-D"):
        predict(state, np.zeros((1, 1, 2)))
