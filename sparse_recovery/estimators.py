"""
Variable-selection estimators compared in the simulation study.

Each selector is a scikit-learn estimator. After ``fit`` it exposes

- ``coef_``    : coefficient vector (Lasso) or 0/1 selection vector (forest)
- ``support_`` : boolean mask of selected variables
- ``error_``   : cross-validated MSE or out-of-bag MSE, None if undefined

and ``evaluate(dataset, beta)`` fits on a SyntheticDataset and returns the
support-recovery scores as an EstimateRecord.

LassoSelector
    Lasso without intercept, tuned by K-fold CV. ``rule`` picks the tuning
    point: '1se' (largest alpha within one standard error of the minimum),
    'min' (minimum CV error) or 'relaxed' (minimum CV error over alpha and the
    relaxation parameter gamma).

RandomForestSelector
    Three-step random-forest selection in the style of VSURF: importance
    thresholding, nested-model interpretation and stepwise prediction.
"""

import warnings

import numpy as np
from sklearn.base import BaseEstimator, RegressorMixin
from sklearn.ensemble import RandomForestRegressor
from sklearn.exceptions import ConvergenceWarning
from sklearn.linear_model import Lasso, LassoCV, lasso_path
from sklearn.model_selection import KFold
from sklearn.tree import DecisionTreeRegressor
from sklearn.utils import check_random_state
from sklearn.utils.validation import check_X_y, check_array, check_is_fitted

from .exceptions import InvalidParameterError
from .scoring import score_selection


LASSO_RULES = ('1se', 'min', 'relaxed')


def lasso_alpha_grid(X, y, n_alphas=100, eps=1e-3):
    """
    Decreasing log-spaced alpha grid for a Lasso without intercept.

    The largest alpha, max|X'y| / n, is the smallest penalty that zeroes every
    coefficient.
    """
    n_samples = X.shape[0]
    alpha_max = np.max(np.abs(X.T @ y)) / n_samples
    if alpha_max <= 0:
        alpha_max = eps
    return np.logspace(np.log10(alpha_max), np.log10(alpha_max * eps), n_alphas)


def one_standard_error_index(alphas, mean_mse, se_mse):
    """Index of the largest alpha whose mean CV error is within one SE of the minimum."""
    i_min = int(np.argmin(mean_mse))
    within = np.flatnonzero(mean_mse <= mean_mse[i_min] + se_mse[i_min])
    return int(within[np.argmax(alphas[within])])


def relaxed_coefficients(X, y, lasso_coef, gamma):
    """
    Blend Lasso coefficients with an OLS refit on the Lasso support.

    Returns ``gamma * lasso_coef + (1 - gamma) * ols`` where ``ols`` is zero
    outside the support. gamma=1 is the plain Lasso, gamma=0 the unpenalized
    refit.
    """
    support = lasso_coef != 0
    ols = np.zeros_like(lasso_coef)
    if np.any(support):
        ols[support] = np.linalg.lstsq(X[:, support], y, rcond=None)[0]
    return gamma * lasso_coef + (1 - gamma) * ols


class BaseSelector(BaseEstimator):
    """Shared scoring hook for the selectors."""

    def evaluate(self, dataset, beta):
        """
        Fit on a synthetic dataset and score the selection against ``beta``.

        Parameters
        ----------
        dataset : SyntheticDataset
            Replicate to fit on.
        beta : array-like of shape (p,)
            True coefficients.

        Returns
        -------
        record : EstimateRecord
        """
        self.fit(dataset.X, dataset.y)
        return score_selection(self.coef_, beta, self.error_)


class LassoSelector(RegressorMixin, BaseSelector):
    """
    Cross-validated Lasso variable selection.

    Parameters
    ----------
    rule : {'1se', 'min', 'relaxed'}, default='1se'
        Tuning rule.
        - '1se': largest alpha within one standard error of the minimum CV
          error. Conservative choice for variable selection.
        - 'min': alpha with minimum CV error.
        - 'relaxed': (alpha, gamma) pair with minimum CV error, where the
          coefficients are ``gamma * lasso + (1 - gamma) * OLS`` on the Lasso
          support.

    cv : int, default=10
        Number of folds.

    n_alphas : int, default=100
        Length of the alpha path.

    eps : float, default=1e-3
        Ratio of smallest to largest alpha on the path.

    gammas : sequence of float, default=(0.0, 0.25, 0.5, 0.75, 1.0)
        Relaxation grid, only used with rule='relaxed'.

    max_iter : int, default=10000
        Maximum coordinate-descent iterations.

    random_state : int, RandomState instance or None, default=None
        Seed for the fold assignment.

    verbose : int, default=0
        Verbosity level. 0=silent, 1=warnings, 2=detailed.

    Attributes
    ----------
    coef_ : ndarray of shape (n_features,)
        Coefficients at the selected tuning point.

    support_ : ndarray of bool
        Nonzero coefficients.

    alpha_ : float
        Selected penalty.

    gamma_ : float
        Selected relaxation parameter (1.0 unless rule='relaxed').

    error_ : float
        Mean CV MSE at the selected tuning point.

    alphas_ : ndarray
        Alpha path, decreasing.

    cv_mean_mse_ : ndarray
        Mean CV MSE per alpha, or per (alpha, gamma) with rule='relaxed'.

    cv_se_mse_ : ndarray
        Standard error of the CV MSE, same shape as ``cv_mean_mse_``.

    Examples
    --------
    >>> from sparse_recovery import simulate, beta_leading_block, LassoSelector
    >>> beta = beta_leading_block(10, 3)
    >>> data = simulate(100, 10, 0.35, beta, SNR=2.0, random_state=0)
    >>> record = LassoSelector(rule='min', random_state=0).evaluate(data, beta)
    >>> print(f"Retained {record.retention} of 3, {record.nonzero} nonzero")
    """

    def __init__(
        self,
        rule='1se',
        cv=10,
        n_alphas=100,
        eps=1e-3,
        gammas=(0.0, 0.25, 0.5, 0.75, 1.0),
        max_iter=10000,
        random_state=None,
        verbose=0
    ):
        self.rule = rule
        self.cv = cv
        self.n_alphas = n_alphas
        self.eps = eps
        self.gammas = gammas
        self.max_iter = max_iter
        self.random_state = random_state
        self.verbose = verbose

    def fit(self, X, y):
        """
        Fit the Lasso path, pick the tuning point and store its coefficients.

        Parameters
        ----------
        X : array-like of shape (n_samples, n_features)
            Design matrix.

        y : array-like of shape (n_samples,)
            Response.

        Returns
        -------
        self : object
            Fitted selector.
        """
        if self.rule not in LASSO_RULES:
            raise InvalidParameterError(
                f"Unknown rule '{self.rule}'. Valid rules are: {list(LASSO_RULES)}"
            )
        X, y = check_X_y(X, y, accept_sparse=False, y_numeric=True)
        self.n_features_in_ = X.shape[1]

        folds = KFold(n_splits=self.cv, shuffle=True, random_state=self.random_state)
        alphas = lasso_alpha_grid(X, y, self.n_alphas, self.eps)

        with warnings.catch_warnings():
            if self.verbose < 1:
                warnings.simplefilter('ignore', ConvergenceWarning)
            if self.rule == 'relaxed':
                self._fit_relaxed(X, y, alphas, folds)
            else:
                self._fit_path(X, y, alphas, folds)

        self.support_ = self.coef_ != 0

        if self.verbose >= 2:
            print(f"LassoSelector(rule={self.rule}): alpha={self.alpha_:.6f}, "
                  f"gamma={self.gamma_:.2f}, nonzero={int(np.sum(self.support_))}, "
                  f"cv_mse={self.error_:.4f}")

        return self

    def _fit_path(self, X, y, alphas, folds):
        """1se and min rules via LassoCV."""
        lasso_cv = LassoCV(
            alphas=alphas,
            cv=folds,
            fit_intercept=False,
            max_iter=self.max_iter,
        )
        lasso_cv.fit(X, y)

        mse_path = lasso_cv.mse_path_
        n_folds = mse_path.shape[1]
        mean_mse = mse_path.mean(axis=1)
        se_mse = mse_path.std(axis=1, ddof=1) / np.sqrt(n_folds)

        if self.rule == '1se':
            i_sel = one_standard_error_index(lasso_cv.alphas_, mean_mse, se_mse)
        else:
            i_sel = int(np.argmin(mean_mse))

        self.alphas_ = lasso_cv.alphas_
        self.cv_mean_mse_ = mean_mse
        self.cv_se_mse_ = se_mse
        self.alpha_ = float(lasso_cv.alphas_[i_sel])
        self.gamma_ = 1.0
        self.error_ = float(mean_mse[i_sel])

        lasso = Lasso(alpha=self.alpha_, fit_intercept=False, max_iter=self.max_iter)
        lasso.fit(X, y)
        self.coef_ = lasso.coef_.copy()

    def _fit_relaxed(self, X, y, alphas, folds):
        """Relaxed Lasso: CV over the (alpha, gamma) grid on shared folds."""
        gammas = np.asarray(self.gammas, dtype=float)
        if gammas.size == 0 or np.any((gammas < 0) | (gammas > 1)):
            raise InvalidParameterError(f"gammas must lie in [0, 1], got {self.gammas}")

        splits = list(folds.split(X))
        errors = np.zeros((len(alphas), len(gammas), len(splits)))

        for k, (train, test) in enumerate(splits):
            _, path, _ = lasso_path(X[train], y[train], alphas=alphas, max_iter=self.max_iter)
            for i in range(len(alphas)):
                for j, gamma in enumerate(gammas):
                    coef = relaxed_coefficients(X[train], y[train], path[:, i], gamma)
                    resid = y[test] - X[test] @ coef
                    errors[i, j, k] = np.mean(resid ** 2)

        mean_mse = errors.mean(axis=2)
        se_mse = errors.std(axis=2, ddof=1) / np.sqrt(len(splits))
        i_sel, j_sel = np.unravel_index(np.argmin(mean_mse), mean_mse.shape)

        _, path, _ = lasso_path(X, y, alphas=alphas, max_iter=self.max_iter)

        self.alphas_ = alphas
        self.gammas_ = gammas
        self.cv_mean_mse_ = mean_mse
        self.cv_se_mse_ = se_mse
        self.alpha_ = float(alphas[i_sel])
        self.gamma_ = float(gammas[j_sel])
        self.error_ = float(mean_mse[i_sel, j_sel])
        self.coef_ = relaxed_coefficients(X, y, path[:, i_sel], self.gamma_)

    def predict(self, X):
        """Predict with the selected coefficients (no intercept)."""
        check_is_fitted(self)
        X = check_array(X)
        return X @ self.coef_


class RandomForestSelector(BaseSelector):
    """
    Random-forest variable selection in three steps.

    1. Thresholding: out-of-bag permutation importances (the increase in a
       tree's OOB MSE when one column is shuffled) are averaged over
       ``n_forests`` forests. A CART tree is fitted to the importance
       standard deviations against the importance rank; its minimum
       prediction is the noise threshold. Variables with mean importance above it are kept.
    2. Interpretation: nested forests on the first k kept variables. The
       smallest model whose OOB error is within one standard deviation of the
       best is retained.
    3. Prediction: starting from the first interpretation variable, the
       remaining ones are added stepwise and kept only when the OOB error
       drops by more than the mean error jump of the discarded tail.

    The selection is returned as a 0/1 vector in ``coef_``. ``error_`` is the
    smallest OOB MSE of the prediction-step models, or None when no variable
    passes thresholding (the null model has no OOB error).

    Parameters
    ----------
    n_estimators : int, default=500
        Trees per forest.

    n_forests : int, default=10
        Forests grown per importance or error estimate.

    max_features : int, float or None, default=1/3
        Features tried per split (p/3 is the usual regression default).

    n_jobs : int, default=4
        Parallel jobs for growing trees, passed to RandomForestRegressor.

    random_state : int, RandomState instance or None, default=None
        Seed for the forests and permutations.

    verbose : int, default=0
        Verbosity level. 0=silent, 1=warnings, 2=detailed.
    """

    # Minimum node size of the CART threshold fit; below it the tree does not
    # split and the threshold is the mean importance SD.
    cart_min_samples_split = 20

    def __init__(
        self,
        n_estimators=500,
        n_forests=10,
        max_features=1 / 3,
        n_jobs=4,
        random_state=None,
        verbose=0
    ):
        self.n_estimators = n_estimators
        self.n_forests = n_forests
        self.max_features = max_features
        self.n_jobs = n_jobs
        self.random_state = random_state
        self.verbose = verbose

    def _make_forest(self, rng):
        return RandomForestRegressor(
            n_estimators=self.n_estimators,
            max_features=self.max_features,
            bootstrap=True,
            oob_score=True,
            n_jobs=self.n_jobs,
            random_state=rng.randint(np.iinfo(np.int32).max),
        )

    def _oob_errors(self, X, y, columns, rng):
        """OOB MSE of ``n_forests`` forests grown on ``columns``."""
        errors = np.empty(self.n_forests)
        for f in range(self.n_forests):
            forest = self._make_forest(rng).fit(X[:, columns], y)
            errors[f] = np.nanmean((y - forest.oob_prediction_) ** 2)
        return errors

    def _oob_importance(self, forest, X, y, rng):
        """
        Out-of-bag permutation importance of every column.

        For each tree the OOB MSE is compared with the OOB MSE after shuffling
        one column among the OOB rows; the increase is averaged over trees.
        """
        n_samples, n_features = X.shape
        increase = np.zeros(n_features)
        n_trees = 0
        for tree, in_bag in zip(forest.estimators_, forest.estimators_samples_):
            oob = np.ones(n_samples, dtype=bool)
            oob[in_bag] = False
            if oob.sum() < 2:
                continue
            X_oob, y_oob = X[oob], y[oob]
            base_mse = np.mean((y_oob - tree.predict(X_oob)) ** 2)
            for j in range(n_features):
                X_perm = X_oob.copy()
                X_perm[:, j] = rng.permutation(X_perm[:, j])
                increase[j] += np.mean((y_oob - tree.predict(X_perm)) ** 2) - base_mse
            n_trees += 1
        return increase / max(n_trees, 1)

    def _threshold_step(self, X, y, rng):
        importances = np.empty((self.n_forests, X.shape[1]))
        for f in range(self.n_forests):
            forest = self._make_forest(rng).fit(X, y)
            importances[f] = self._oob_importance(forest, X, y, rng)

        mean_imp = importances.mean(axis=0)
        std_imp = importances.std(axis=0, ddof=1) if self.n_forests > 1 else np.zeros(X.shape[1])
        order = np.argsort(-mean_imp, kind='stable')

        rank = np.arange(1, len(order) + 1).reshape(-1, 1)
        cart = DecisionTreeRegressor(
            min_samples_split=self.cart_min_samples_split, random_state=0
        )
        cart.fit(rank, std_imp[order])
        threshold = float(np.min(cart.predict(rank)))

        self.importance_mean_ = mean_imp
        self.importance_std_ = std_imp
        self.threshold_ = threshold
        return [int(j) for j in order if mean_imp[j] > threshold]

    def _interpretation_step(self, X, y, thres_vars, rng):
        err_mean = np.empty(len(thres_vars))
        err_std = np.empty(len(thres_vars))
        for k in range(len(thres_vars)):
            errors = self._oob_errors(X, y, thres_vars[:k + 1], rng)
            err_mean[k] = errors.mean()
            err_std[k] = errors.std(ddof=1) if self.n_forests > 1 else 0.0

        best = int(np.argmin(err_mean))
        k_sel = int(np.flatnonzero(err_mean <= err_mean[best] + err_std[best])[0])

        self.err_interp_ = err_mean
        return thres_vars[:k_sel + 1]

    def _prediction_step(self, X, y, interp_vars, rng):
        tail = self.err_interp_[len(interp_vars) - 1:]
        mean_jump = float(np.mean(np.abs(np.diff(tail)))) if len(tail) > 1 else 0.0

        selected = [interp_vars[0]]
        err_prev = self._oob_errors(X, y, selected, rng).mean()
        err_pred = [err_prev]
        for var in interp_vars[1:]:
            err_new = self._oob_errors(X, y, selected + [var], rng).mean()
            if err_prev - err_new > mean_jump:
                selected.append(var)
                err_pred.append(err_new)
                err_prev = err_new

        self.mean_jump_ = mean_jump
        self.err_pred_ = np.asarray(err_pred)
        return selected

    def fit(self, X, y):
        """
        Run thresholding, interpretation and prediction steps.

        Parameters
        ----------
        X : array-like of shape (n_samples, n_features)
            Design matrix.

        y : array-like of shape (n_samples,)
            Response.

        Returns
        -------
        self : object
            Fitted selector.
        """
        X, y = check_X_y(X, y, accept_sparse=False, y_numeric=True)
        if self.n_forests < 1:
            raise InvalidParameterError(f"n_forests must be at least 1, got {self.n_forests}")
        self.n_features_in_ = X.shape[1]
        rng = check_random_state(self.random_state)

        # Bootstrap samples without OOB rows trigger UserWarnings for small forests
        with warnings.catch_warnings():
            warnings.simplefilter('ignore', UserWarning)
            thres_vars = self._threshold_step(X, y, rng)
            if thres_vars:
                interp_vars = self._interpretation_step(X, y, thres_vars, rng)
                pred_vars = self._prediction_step(X, y, interp_vars, rng)
            else:
                interp_vars, pred_vars = [], []
                self.err_interp_ = np.array([])
                self.err_pred_ = np.array([])
                self.mean_jump_ = np.nan

        if not thres_vars and self.verbose >= 1:
            warnings.warn(
                "No variable passed the importance threshold; "
                "the selection is empty and the OOB error is undefined.",
                UserWarning
            )

        self.varselect_thres_ = np.asarray(thres_vars, dtype=int)
        self.varselect_interp_ = np.asarray(interp_vars, dtype=int)
        self.varselect_pred_ = np.asarray(pred_vars, dtype=int)

        self.support_ = np.zeros(self.n_features_in_, dtype=bool)
        self.support_[self.varselect_pred_] = True
        self.coef_ = self.support_.astype(float)
        self.error_ = float(np.min(self.err_pred_)) if len(self.err_pred_) else None

        if self.verbose >= 2:
            print(f"RandomForestSelector: thresholding kept {len(thres_vars)}, "
                  f"interpretation {len(interp_vars)}, prediction {len(pred_vars)}")

        return self


METHODS = {
    'Lasso': lambda: LassoSelector(rule='1se'),
    'Lasso_min': lambda: LassoSelector(rule='min'),
    'Relaxed_Lasso': lambda: LassoSelector(rule='relaxed'),
    'RF': lambda: RandomForestSelector(),
}


def make_selector(name, **params):
    """
    Create a registered selector by display name.

    Keyword arguments the selector does not accept are ignored, so one set of
    study-level settings (``cv``, ``n_jobs``, ``random_state``, ``verbose``)
    can be passed to every method.

    Examples
    --------
    >>> make_selector('Lasso', cv=5, n_jobs=2).get_params()['cv']
    5
    """
    if name not in METHODS:
        raise InvalidParameterError(
            f"Unknown method '{name}'. Valid methods are: {list(METHODS)}"
        )
    selector = METHODS[name]()
    valid = selector.get_params()
    selector.set_params(**{k: v for k, v in params.items() if k in valid})
    return selector
