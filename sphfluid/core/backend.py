"""
Backend selection and stage dispatch for the SPH tick.

Three backends implement the same stages (compute_density, compute_forces,
integrate):
1. CPU (NumPy) - always available, row tiles broadcast against the whole pool
2. Numba - JIT-compiled, one prange task per particle
3. GPU (PyTorch) - CUDA device, row tiles broadcast against the whole pool

Whatever the backend, a task only writes its own particle's output slot.
The backend is chosen globally with `set_backend` or per call with
`dispatch(..., backend=...)`.
"""

import enum
import logging
import warnings
from typing import Optional, Dict, Callable
from dataclasses import dataclass

logger = logging.getLogger(__name__)


class Backend(enum.Enum):
    """Available computation backends."""
    CPU = "cpu"      # NumPy
    NUMBA = "numba"  # Numba JIT
    GPU = "gpu"      # PyTorch/CUDA


@dataclass
class BackendInfo:
    backend: Backend
    available: bool
    device_name: str = ""


def _probe_numba() -> BackendInfo:
    try:
        import numba
    except ImportError:
        return BackendInfo(Backend.NUMBA, False)
    threads = numba.config.NUMBA_NUM_THREADS
    return BackendInfo(Backend.NUMBA, True, f"CPU (Numba {numba.__version__}, {threads} threads)")


def _probe_gpu() -> BackendInfo:
    try:
        import torch
    except ImportError:
        return BackendInfo(Backend.GPU, False)
    if not torch.cuda.is_available():
        return BackendInfo(Backend.GPU, False)
    memory_gb = torch.cuda.get_device_properties(0).total_memory / 1e9
    return BackendInfo(Backend.GPU, True,
                       f"{torch.cuda.get_device_name(0)} (PyTorch, {memory_gb:.1f} GB)")


class BackendManager:
    """Tracks which backends exist and which stage implementation each one owns."""

    def __init__(self):
        self._current_backend = Backend.CPU
        self._info = {
            Backend.CPU: BackendInfo(Backend.CPU, True, "CPU (NumPy)"),
            Backend.NUMBA: _probe_numba(),
            Backend.GPU: _probe_gpu(),
        }
        # stage name -> {Backend: callable}
        self._stages: Dict[str, Dict[Backend, Callable]] = {}

    @property
    def current_backend(self) -> Backend:
        return self._current_backend

    def availability(self) -> Dict[Backend, bool]:
        return {b: info.available for b, info in self._info.items()}

    def is_available(self, backend: Backend) -> bool:
        return self._info[backend].available

    def set_backend(self, backend: Backend) -> bool:
        """Make `backend` the global choice.

        Returns:
            False (with a warning) when the backend is not available
        """
        if not self.is_available(backend):
            warnings.warn(f"Backend {backend.value} not available, keeping {self._current_backend.value}")
            return False

        self._current_backend = backend
        logger.info("Backend set to: %s", self._info[backend].device_name)
        return True

    def auto_select_backend(self, n_particles: int) -> Backend:
        """Pick a backend from the pool size.

        Every stage is O(N^2), so the GPU pays off at a few thousand
        particles and Numba at a few hundred.
        """
        if n_particles > 4096 and self.is_available(Backend.GPU):
            return Backend.GPU
        if n_particles > 256 and self.is_available(Backend.NUMBA):
            return Backend.NUMBA
        return Backend.CPU

    def register_implementation(self, function_name: str, backend: Backend,
                                implementation: Callable):
        self._stages.setdefault(function_name, {})[backend] = implementation

    def get_implementation(self, function_name: str,
                           backend: Optional[Backend] = None) -> Callable:
        """Look up a stage, falling back to the CPU version with a warning.

        Raises:
            ValueError: If the stage name is unknown
        """
        if backend is None:
            backend = self._current_backend

        implementations = self._stages.get(function_name)
        if not implementations:
            raise ValueError(f"No implementations registered for {function_name}")

        if backend in implementations:
            return implementations[backend]

        if Backend.CPU in implementations:
            warnings.warn(f"No {backend.value} implementation for {function_name}, using CPU")
            return implementations[Backend.CPU]

        raise ValueError(f"No implementation found for {function_name}")

    def dispatch(self, function_name: str, *args, backend: Optional[Backend] = None, **kwargs):
        return self.get_implementation(function_name, backend)(*args, **kwargs)

    def print_info(self):
        print("\nSPH Backend Information")
        print("=" * 60)
        for backend, info in self._info.items():
            status = "+" if info.available else "-"
            print(f"{status} {backend.value:6s}: {info.device_name or 'not available'}")
        print(f"\nCurrent backend: {self._current_backend.value}")
        print("=" * 60)


# Global backend manager instance
_backend_manager = BackendManager()


def set_backend(backend: str) -> bool:
    """Set the global backend ('cpu', 'numba' or 'gpu').

    Returns:
        True if successful
    """
    try:
        backend_enum = Backend(backend.lower())
    except ValueError:
        warnings.warn(f"Invalid backend: {backend}. Choose from: cpu, numba, gpu")
        return False
    return _backend_manager.set_backend(backend_enum)


def get_backend() -> str:
    return _backend_manager.current_backend.value


def list_backends() -> Dict[str, bool]:
    """Backend name -> availability."""
    return {b.value: available for b, available in _backend_manager.availability().items()}


def auto_select_backend(n_particles: int) -> str:
    """Select and activate the best backend for the pool size."""
    backend = _backend_manager.auto_select_backend(n_particles)
    _backend_manager.set_backend(backend)
    return backend.value


def print_backend_info():
    _backend_manager.print_info()


def backend_function(function_name: str):
    """Register the decorated function as a stage implementation.

    Usage:
        @backend_function("compute_density")
        @for_backend(Backend.NUMBA)
        def compute_density_numba(...):
            ...
    """
    def decorator(func):
        if hasattr(func, '_backend'):
            _backend_manager.register_implementation(function_name, func._backend, func)
        return func
    return decorator


def for_backend(backend: Backend):
    """Tag a function with the backend it implements."""
    def decorator(func):
        func._backend = backend
        return func
    return decorator


def dispatch(function_name: str, *args, backend: Optional[str] = None, **kwargs):
    """Call stage `function_name` on `backend` (None for the global backend)."""
    backend_enum = Backend(backend) if backend else None
    return _backend_manager.dispatch(function_name, *args, backend=backend_enum, **kwargs)
