'''History class definition
Per-step record of osculating semi-major axes and their tracked bounds'''

import numpy as np
import pandas as pd
import plotly.graph_objects as go
from typing import Dict, List, Optional, Sequence, TYPE_CHECKING
from .config import config
from .orbital_elements import OrbitError, orbit_from_particle

if TYPE_CHECKING:
    from .simulation import Simulation


class History:
    """
    Records, after each step, the osculating semi-major axis of selected
    particles together with their ``min_a``/``max_a`` bounds.

    Parameters
    ----------
    particles : sequence of int, optional
        Particle indices to record. If None, every real particle other than
        the primary that currently tracks its semi-major axis is recorded.

    Examples
    --------
    >>> hist = History()
    >>> sim.integrate(100.0, history=hist)
    >>> df = hist.to_dataframe()
    >>> fig = hist.plot(1)
    """
    _COLUMNS = ['t', 'particle', 'a', 'min_a', 'max_a']

    def __init__(self, particles: Optional[Sequence[int]] = None):
        self._indices = None if particles is None else [int(k) for k in particles]
        self._rows: List[Dict] = []

    # ========== RECORDING ==========
    def record(self, sim: "Simulation") -> None:
        """Append one row per recorded particle for the current state."""
        primary = sim.particles[0]
        if self._indices is None:
            indices = [k for k in range(1, sim.N_real) if sim.particles[k].tracks_a]
        else:
            indices = self._indices
        for k in indices:
            p = sim.particles[k]
            try:
                a = orbit_from_particle(sim.G, p, primary).a
            except OrbitError:
                a = np.nan
            self._rows.append({
                't': sim.t,
                'particle': k,
                'a': a,
                'min_a': np.nan if p.min_a is None else p.min_a,
                'max_a': np.nan if p.max_a is None else p.max_a,
            })

    def clear(self) -> None:
        """Discard all recorded rows."""
        self._rows.clear()

    # ========== EXPORT ==========
    def to_dataframe(self) -> pd.DataFrame:
        """
        Export the record to a pandas DataFrame.

        Returns
        -------
        pd.DataFrame
            Long-format frame with columns t, particle, a, min_a, max_a
        """
        return pd.DataFrame(self._rows, columns=self._COLUMNS)

    def plot(self, particle: int, n_points: Optional[int] = None,
             trace_color: Optional[str] = None,
             range_color: Optional[str] = None) -> go.Figure:
        """
        Plot the semi-major axis of one particle with its min/max envelope.

        Parameters
        ----------
        particle : int
            Particle index
        n_points : int, optional
            Maximum number of samples drawn (default config.DEFAULT_PLOT_POINTS)
        trace_color, range_color : str, optional
            Colors of the semi-major axis line and of the envelope

        Returns
        -------
        go.Figure
        """
        n_points = n_points or config.DEFAULT_PLOT_POINTS
        trace_color = trace_color or config.DEFAULT_TRACE_COLOR
        range_color = range_color or config.DEFAULT_RANGE_COLOR

        df = self.to_dataframe()
        df = df[df['particle'] == particle]
        if df.empty:
            raise ValueError(f"No history recorded for particle {particle}")
        # thin evenly to at most n_points rows
        stride = max(1, int(np.ceil(len(df) / n_points)))
        df = df.iloc[::stride]

        fig = go.Figure()
        fig.add_trace(go.Scatter(
            x=df['t'], y=df['max_a'],
            mode='lines',
            line=dict(color=range_color, width=1),
            name='max a',
        ))
        fig.add_trace(go.Scatter(
            x=df['t'], y=df['min_a'],
            mode='lines',
            line=dict(color=range_color, width=1),
            fill='tonexty',
            name='min a',
        ))
        fig.add_trace(go.Scatter(
            x=df['t'], y=df['a'],
            mode='lines',
            line=dict(color=trace_color, width=2),
            name='a',
            hovertemplate='t: %{x:.6g}<br>a: %{y:.10g}<extra></extra>'
        ))
        fig.update_layout(
            xaxis_title='Time',
            yaxis_title='Semi-major axis',
            title=f'Semi-major axis range of particle {particle}',
            showlegend=True
        )
        return fig

    # ========== SPECIAL METHODS ==========
    def __len__(self):
        return len(self._rows)

    def __repr__(self):
        return f"History(rows={len(self._rows)}, particles={self._indices})"
