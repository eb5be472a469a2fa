# Configuration file for the Sphinx documentation builder.
#
# This file only contains a selection of the most common options. For a full
# list see the documentation:
# https://www.sphinx-doc.org/en/master/usage/configuration.html


# -- Path setup --------------------------------------------------------------

# Modules are documented with autodoc from the repository root.

import os
import sys

sys.path.insert(0, os.path.abspath('../../.'))


# -- Project information -----------------------------------------------------

project = 'meshtopo'
copyright = '2024, m3shware'
author = 'm3shware'

# The full version, including alpha/beta/rc tags
release = '0.1.0'


# -- General configuration ---------------------------------------------------

extensions = [
    'sphinx.ext.autodoc',
    'sphinx.ext.intersphinx',
    'sphinx.ext.mathjax',
    'sphinx.ext.napoleon',
    'sphinx.ext.autosummary',
    'sphinx.ext.viewcode',
]

# Link to the python and numpy documentation
intersphinx_mapping = {
    'python': ('https://docs.python.org/3', None),
    'numpy': ('https://numpy.org/doc/stable', None),
}

autosummary_generate = True

templates_path = ['_templates']
exclude_patterns = []

toc_object_entries = False


# -- Options for AutoDoc output -------------------------------------------

# Halfedge, vertex and face classes are listed in source order.
autodoc_member_order = 'bysource'


def skip(app, what, name, obj, skip, options):
    if name in ('__init__', '__new__'):
        return True

    # Fields generated by namedtuple carry no documentation of their own.
    if what == 'class' and isinstance(obj, property) and obj.__doc__ and \
            obj.__doc__.startswith('Alias for field number'):
        return True

    return None


def setup(app):
    app.connect('autodoc-skip-member', skip)


# -- Options for HTML output -------------------------------------------------

html_theme = 'sphinx_rtd_theme'
html_show_sourcelink = True
