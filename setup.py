"""
Setup script for adaptive-quiz-engine with optional Cython compilation.

This builds the internal modules (_*/…py) as compiled extensions when
Cython is available, while keeping the public API (engine.py,
callbacks.py, types.py, errors.py) as readable Python source.
"""

from setuptools import setup, find_packages, Extension
import glob
import os

# Check if Cython is available
try:
    from Cython.Build import cythonize
    USE_CYTHON = True
except ImportError:
    USE_CYTHON = False
    print("Cython not found. Building without compilation (source only).")

# Internal modules to compile with Cython
CYTHON_MODULES = [
    path
    for pattern in (
        "src/adaptive_quiz/_session/*.py",
        "src/adaptive_quiz/_generator/*.py",
        "src/adaptive_quiz/_archive/*.py",
        "src/adaptive_quiz/_shared/*.py",
    )
    for path in sorted(glob.glob(pattern))
    if not path.endswith("__init__.py")
]


def get_extensions():
    """Build Extension objects for Cython compilation."""
    if not USE_CYTHON:
        return []

    extensions = []
    for module_path in CYTHON_MODULES:
        if os.path.exists(module_path):
            # src/adaptive_quiz/_session/foo.py -> adaptive_quiz._session.foo
            module_name = module_path.replace("src/", "").replace("/", ".").replace(".py", "")
            extensions.append(Extension(name=module_name, sources=[module_path]))
    return extensions


def get_ext_modules():
    """Get extension modules, cythonized if Cython is available."""
    extensions = get_extensions()
    if not extensions:
        return []

    return cythonize(
        extensions,
        compiler_directives={
            "language_level": "3",
            "boundscheck": False,
            "wraparound": False,
        },
        nthreads=os.cpu_count() or 1,
    )


# Only compile when explicitly requested; editable installs stay pure Python
ext_modules = get_ext_modules() if USE_CYTHON and os.environ.get("QUIZ_BUILD_CYTHON") else []

setup(
    name="adaptive-quiz-engine",
    version="1.0.0",
    description="Adaptive quiz session engine with an untrusted-generator boundary",
    python_requires=">=3.10",
    packages=find_packages(where="src"),
    package_dir={"": "src"},
    ext_modules=ext_modules,
    install_requires=[
        "python-dotenv>=1.0.0",
        "pydantic>=2.5.0",
    ],
    extras_require={
        "llm": ["anthropic>=0.18.0"],
        "test": ["pytest>=7.0"],
        "all": ["anthropic>=0.18.0"],
        "dev": [
            "cython>=3.0",
            "build",
            "wheel",
            "pytest>=7.0",
        ],
    },
    package_data={
        "adaptive_quiz._catalog": ["data/*.json"],
        "adaptive_quiz._archive": ["schema.sql"],
        "adaptive_quiz": ["*.so", "*.pyd"],
    },
    entry_points={
        "console_scripts": [
            "adaptive-quiz=adaptive_quiz.cli:main",
        ],
    },
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: Education",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Programming Language :: Cython",
    ],
)
