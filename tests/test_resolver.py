"""
Unit tests for module name resolution.
"""
import pytest
import random
import sys
import os

sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..'))
from jsbundle.errors import StructuralError, UnresolvedModuleError
from jsbundle.kernel import find_main_function, unpack_kernel
from jsbundle.parser import parse
from jsbundle.resolver import (
    ModuleKind,
    NameTable,
    candidate_name,
    classify_module,
    entry_name,
    extract_module_names,
    package_name,
)

FIB_DIR = os.path.join(os.path.dirname(__file__), 'fib')


def kernel_arguments(source):
    return unpack_kernel(find_main_function(parse(source)))


def bundle(modules, entries):
    """Build bundle source from ``{id: (body, {specifier: id})}``."""
    parts = []
    for module_id, (body, requires) in modules.items():
        mapping = ', '.join(f'"{name}": {target}' for name, target in requires.items())
        parts.append(f'{module_id}: [function (require, module, exports) {{ {body} }}, {{{mapping}}}]')
    return f'(function e(t, n, r) {{}})({{{", ".join(parts)}}}, {{}}, [{", ".join(map(str, entries))}]);'


class TestCandidateName:
    """Tests for candidate_name()."""

    def test_sibling(self):
        """./x next to main is x."""
        assert candidate_name('main', './fib') == 'fib'

    def test_subdirectory(self):
        """Relative names resolve against the requiring module's directory."""
        assert candidate_name('lib/a', './b') == 'lib/b'
        assert candidate_name('lib/a', '../c') == 'c'

    def test_extension_is_stripped(self):
        """.js and .json extensions are dropped."""
        assert candidate_name('main', './data.json') == 'data'
        assert candidate_name('main', './fib.js') == 'fib'

    def test_directory_require(self):
        """Requiring a directory names its index module."""
        assert candidate_name('lib/a', '.') == 'lib/index'
        assert candidate_name('lib/a', './') == 'lib/index'
        assert candidate_name('lib/a/b', '..') == 'lib/index'

    def test_package(self):
        """Bare specifiers live under node_modules."""
        assert candidate_name('main', 'lodash') == 'node_modules/lodash/index'
        assert candidate_name('main', 'lodash/fp') == 'node_modules/lodash/fp/index'


class TestClassification:
    """Tests for module classification."""

    def test_local(self):
        assert classify_module('lib/a') is ModuleKind.LOCAL

    def test_builtin(self):
        """Node.js core modules are builtins."""
        assert classify_module('node_modules/events/index') is ModuleKind.BUILTIN
        assert classify_module('node_modules/fs/index') is ModuleKind.BUILTIN

    def test_dependency(self):
        """Lowercase package names are published dependencies."""
        assert classify_module('node_modules/lodash/index') is ModuleKind.DEPENDENCY
        assert classify_module('node_modules/@scope/pkg/index') is ModuleKind.DEPENDENCY

    def test_vendored_copy(self):
        """Anything else under node_modules is extracted like a local module."""
        assert classify_module('node_modules/MyLib/index') is ModuleKind.LOCAL

    def test_package_name(self):
        assert package_name('node_modules/@scope/pkg/lib/x') == '@scope/pkg'
        assert package_name('node_modules/lodash/fp/index') == 'lodash'
        assert package_name('lib/a') is None


class TestNameTable:
    """Tests for conflict handling in NameTable."""

    def test_first_name_wins(self):
        """An unnamed id takes the first candidate."""
        names = NameTable()
        names.propose('1', 'fib')
        assert names['1'] == 'fib'

    def test_same_name_is_not_a_conflict(self):
        """Case-insensitively equal names are the same evidence."""
        names = NameTable()
        names.propose('1', 'Fib')
        names.propose('1', 'fib')
        assert names['1'] == 'Fib'
        assert names.warnings == []

    def test_longer_candidate_keeps_existing(self):
        """A longer conflicting candidate is reported and ignored."""
        names = NameTable()
        names.propose('1', 'lib')
        names.propose('1', 'lib/other')
        assert names['1'] == 'lib'
        assert len(names.warnings) == 1

    def test_shorter_candidate_renames_to_index(self):
        """A shorter conflicting candidate moves the id to <candidate>/index."""
        names = NameTable()
        names.propose('1', 'lib/util')
        names.propose('1', 'lib')
        assert names['1'] == 'lib/index'
        assert len(names.warnings) == 1

    def test_index_alias_is_quiet(self):
        """Once renamed, the same shorter candidate is not reported again."""
        names = NameTable()
        names.propose('1', 'lib/util')
        names.propose('1', 'lib')
        names.propose('1', 'lib')
        assert len(names.warnings) == 1

    def test_seed(self):
        """Seeded names are entry names and are never replaced by seeding."""
        names = NameTable()
        names.seed('2', 'main')
        names.seed('2', 'browser')
        assert names['2'] == 'main'
        assert names.entry_names == ['main']

    def test_entry_names_beyond_sentinels(self):
        assert entry_name(0) == 'main'
        assert entry_name(1) == 'browser'
        assert entry_name(2) == 'entry2'


class TestExtractModuleNames:
    """Tests for extract_module_names()."""

    @pytest.mark.parametrize('fixture', ['bundle.js', 'bundle-min.js'])
    def test_fib_bundles(self, fixture):
        """Both fixture bundles name their modules main and fib."""
        with open(os.path.join(FIB_DIR, fixture), encoding='utf-8') as f:
            module_map, main = unpack_kernel(find_main_function(parse(f.read(), fixture)))
        names = extract_module_names(module_map, main)
        assert sorted(names.as_dict().values()) == ['fib', 'main']

    def test_transitive_names(self):
        """Names spread through modules listed before their requirer."""
        source = bundle({
            1: ('', {'./c': 3}),
            2: ('', {'./lib/b': 1}),
            3: ('', {}),
        }, [2])
        names = extract_module_names(*kernel_arguments(source))
        assert names.as_dict() == {'2': 'main', '1': 'lib/b', '3': 'lib/c'}

    def test_unreachable_module_is_unnamed(self):
        """A module nobody requires stays out of the table."""
        source = bundle({1: ('', {}), 2: ('', {})}, [1])
        names = extract_module_names(*kernel_arguments(source))
        assert names.as_dict() == {'1': 'main'}

    def test_second_entry_is_browser(self):
        """The second entry id is named browser."""
        source = bundle({1: ('', {}), 2: ('', {})}, [1, 2])
        names = extract_module_names(*kernel_arguments(source))
        assert names.as_dict() == {'1': 'main', '2': 'browser'}
        assert names.entry_names == ['main', 'browser']

    def test_missing_target_raises(self):
        """Requiring an id that is not in the module map is an error."""
        source = bundle({1: ('', {'./gone': 9})}, [1])
        with pytest.raises(UnresolvedModuleError):
            extract_module_names(*kernel_arguments(source))

    def test_excluded_require_is_skipped(self):
        """A require map value that is not an id is ignored."""
        source = '(function e(t, n, r) {})({1: [function (require, module, exports) {}, {"fs": undefined}]}, {}, [1]);'
        names = extract_module_names(*kernel_arguments(source))
        assert names.as_dict() == {'1': 'main'}

    def test_malformed_entry(self):
        """Module map values must be [function, object] pairs."""
        source = '(function e(t, n, r) {})({1: [1, {}]}, {}, [1]);'
        with pytest.raises(StructuralError):
            extract_module_names(*kernel_arguments(source))

    def test_conflict_warning_is_recorded(self):
        """Conflicting require evidence ends up in the warnings list."""
        source = bundle({
            1: ('', {'./a': 2, './b': 3}),
            2: ('', {'./lib/shared': 4}),
            3: ('', {'./lib': 4}),
            4: ('', {}),
        }, [1])
        names = extract_module_names(*kernel_arguments(source))
        assert names['4'] == 'lib/index'
        assert len(names.warnings) == 1

    def test_conflict_depends_on_require_order(self):
        """When the shorter name is seen first it is kept as is."""
        source = bundle({
            1: ('', {'./a': 2, './b': 3}),
            2: ('', {'./lib': 4}),
            3: ('', {'./lib/shared': 4}),
            4: ('', {}),
        }, [1])
        names = extract_module_names(*kernel_arguments(source))
        assert names['4'] == 'lib'
        assert len(names.warnings) == 1

    @pytest.mark.parametrize('seed', range(10))
    def test_key_order_does_not_matter(self, seed):
        """Shuffling the module map gives the same names."""
        modules = {
            1: ('', {'./a': 2, './b': 3}),
            2: ('', {'./c': 4}),
            3: ('', {'./c.js': 4}),
            4: ('', {'./lib/d': 5}),
            5: ('', {'../a': 2}),
        }
        items = list(modules.items())
        random.Random(seed).shuffle(items)
        names = extract_module_names(*kernel_arguments(bundle(dict(items), [1])))
        assert names.as_dict() == {'1': 'main', '2': 'a', '3': 'b', '4': 'c', '5': 'lib/d'}
        assert names.warnings == []
