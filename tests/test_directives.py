"""
Directive compilation tests

Tests every built-in directive through the full compiler, plus the
switch state machine and the error paths.
"""

import pytest
from loguru import logger

from nutcompiler.config import AppSettings
from nutcompiler.lib.compiler import Compiler
from nutcompiler.lib.directives import DirectiveRegistry
from nutcompiler.lib.errors import MalformedDirective, MisplacedDirective, UnknownDirective
from nutcompiler.models.context import SwitchState, SwitchStateTracker
from nutcompiler.models.directives import BUILTIN_DIRECTIVES, DirectiveCategory


@pytest.fixture
def compiler():
    return Compiler(settings=AppSettings())


@pytest.fixture
def strict_compiler():
    return Compiler(settings=AppSettings(strict_mode=True))


class TestRegistry:
    """Test the closed directive table"""

    def test_covers_builtins(self):
        registry = DirectiveRegistry()
        assert {spec.name for spec in registry.specs.values()} == set(BUILTIN_DIRECTIVES)

    def test_lookup_is_case_insensitive(self):
        registry = DirectiveRegistry()
        assert registry.get("ENDIF") is registry.get("endif")

    def test_unknown_lookup(self):
        assert DirectiveRegistry().get("nope") is None

    def test_list_by_category(self):
        names = {spec.name for spec in DirectiveRegistry().directives_listByCategory(DirectiveCategory.SWITCH)}
        assert names == {"switch", "case", "endswitch"}

    def test_incomplete_table_rejected(self):
        """A registry missing a built-in fails when it is built"""

        class PartialRegistry(DirectiveRegistry):
            def blockDirectives_register(self):
                pass

        with pytest.raises(RuntimeError, match="end"):
            PartialRegistry()


class TestLayoutDirectives:
    """Test layout, section, show and include"""

    def test_layout_sets_trailer(self, compiler):
        result = compiler.compile("{@layout: master}body")
        assert result == (
            "<?php $this->layout('master'); ?>body"
            "\n\n<?php $this->renderLayout($this->data); ?>"
        )

    def test_layout_name_quotes_normalized(self, compiler):
        assert compiler.compile("{@layout:'master'}").startswith("<?php $this->layout('master'); ?>")

    def test_section(self, compiler):
        result = compiler.compile("{@section:content}Hi{@endsection}")
        assert result == "<?php $this->sectionStart('content'); ?>Hi<?php $this->sectionEnd(); ?>"

    def test_show(self, compiler):
        assert compiler.compile("{@show}") == "<?php $this->showSection(); ?>"

    def test_include(self, compiler):
        assert compiler.compile("{@include: partials.header}") == (
            "<?php echo $this->factory->make('partials.header')->render(); ?>"
        )

    def test_no_layout_no_trailer(self, compiler):
        assert "renderLayout" not in compiler.compile("{@section:a}{@endsection}")


class TestAssignmentDirectives:
    """Test set and reset"""

    def test_set_assigns_if_unset(self, compiler):
        assert compiler.compile("{@set: title = 'Home'}") == (
            "<?php if(!isset($title)) { $title = 'Home'; } ?>"
        )

    def test_reset_assigns(self, compiler):
        assert compiler.compile("{@reset: count = 0}") == "<?php $count = 0; ?>"

    def test_set_compiles_paths(self, compiler):
        assert compiler.compile("{@reset: page.title = site.name}") == (
            "<?php $page->title = $site->name; ?>"
        )

    def test_set_without_equals_is_diagnostic(self, compiler):
        assert compiler.compile("{@set: title}") == "<?php /* Cannot compile set: title */ ?>"


class TestConditionalDirectives:
    """Test if/elseif/else/endif"""

    def test_if_else(self, compiler):
        assert compiler.compile("{@if:user.active}Yes{@else}No{@endif}") == (
            "<?php if($user->active) { ?>Yes<?php } else { ?>No<?php } ?>"
        )

    def test_elseif(self, compiler):
        assert compiler.compile("{@if:a}A{@elseif:b}B{@endif}") == (
            "<?php if($a) { ?>A<?php } elseif($b) { ?>B<?php } ?>"
        )

    def test_negated_condition(self, compiler):
        assert compiler.compile("{@if:!user.active}x{@endif}") == (
            "<?php if(!$user->active) { ?>x<?php } ?>"
        )

    def test_comparison_with_literal(self, compiler):
        assert compiler.compile("{@if:user.role == 'admin'}x{@endif}") == (
            "<?php if($user->role == 'admin') { ?>x<?php } ?>"
        )

    def test_comparison_of_variables(self, compiler):
        assert compiler.compile("{@if:a != b}x{@elseif:a > 1}y{@endif}") == (
            "<?php if($a != $b) { ?>x<?php } elseif($a > 1) { ?>y<?php } ?>"
        )

    def test_directive_name_case_insensitive(self, compiler):
        assert compiler.compile("{@ENDIF}") == "<?php } ?>"

    def test_generic_end(self, compiler):
        assert compiler.compile("{@if:a}A{@end}") == "<?php if($a) { ?>A<?php } ?>"

    def test_missing_condition_is_diagnostic(self, compiler):
        assert "Cannot compile if" in compiler.compile("{@if}")

    def test_missing_condition_strict(self, strict_compiler):
        with pytest.raises(MalformedDirective):
            strict_compiler.compile("{@if}")


class TestForDirective:
    """Test loop compilation"""

    def test_single_variable(self, compiler):
        assert compiler.compile("{@for: item in items}{{ item }}{@endfor}") == (
            "<?php if($items && !empty($items)) foreach($items as $item) { ?>"
            "<?php echo $item ?>"
            "<?php } ?>"
        )

    def test_key_value(self, compiler):
        assert compiler.compile("{@for: key,value in items}") == (
            "<?php if($items && !empty($items)) foreach($items as $key => $value) { ?>"
        )

    def test_collection_path(self, compiler):
        assert compiler.compile("{@for:post in user.posts}") == (
            "<?php if($user->posts && !empty($user->posts)) foreach($user->posts as $post) { ?>"
        )

    def test_malformed_does_not_abort(self, compiler):
        """Without ' in ' the loop becomes an inert comment and compiling goes on"""
        result = compiler.compile("{@for: bogus}after {{ x }}")
        assert result == "<?php /* Cannot compile for: bogus */ ?>after <?php echo $x ?>"

    def test_malformed_comment_cannot_escape(self, compiler):
        result = compiler.compile("{@for: a */ ?> b}")
        assert result == "<?php /* Cannot compile for: a * / ? > b */ ?>"

    def test_malformed_strict(self, strict_compiler):
        with pytest.raises(MalformedDirective) as excinfo:
            strict_compiler.compile("{@for: bogus}")
        assert excinfo.value.directive == "for"
        assert excinfo.value.raw == "bogus"


class TestSwitchDirectives:
    """Test the switch/case state machine"""

    def test_cases_are_independent_ifs(self, compiler):
        result = compiler.compile("{@switch: role}{@case: 'admin'}A{@case: 'user'}U{@endswitch}")
        assert result == (
            "<?php if($role == 'admin') { ?>A"
            "<?php } if($role == 'user') { ?>U"
            "<?php } ?>"
        )
        assert "elseif" not in result
        assert result.count("{") == result.count("}")

    def test_switch_emits_nothing(self, compiler):
        assert compiler.compile("a{@switch: role}b") == "ab"

    def test_empty_switch(self, compiler):
        assert compiler.compile("{@switch: role}{@endswitch}") == ""

    def test_sequential_switches_do_not_share_state(self, compiler):
        """The second switch starts fresh with its own subject"""
        result = compiler.compile(
            "{@switch:a}{@case:1}x{@endswitch}{@switch:b}{@case:2}y{@endswitch}"
        )
        assert result == (
            "<?php if($a == 1) { ?>x<?php } ?>"
            "<?php if($b == 2) { ?>y<?php } ?>"
        )

    def test_nested_switch(self, compiler):
        result = compiler.compile(
            "{@switch:a}{@case:1}{@switch:b}{@case:2}x{@endswitch}{@case:3}y{@endswitch}"
        )
        assert result == (
            "<?php if($a == 1) { ?>"
            "<?php if($b == 2) { ?>x<?php } ?>"
            "<?php } if($a == 3) { ?>y<?php } ?>"
        )

    def test_case_value_negated(self, compiler):
        result = compiler.compile("{@switch:open}{@case:!closed}x{@endswitch}")
        assert result == "<?php if($open == !$closed) { ?>x<?php } ?>"

    def test_case_without_switch(self, compiler):
        with pytest.raises(MisplacedDirective) as excinfo:
            compiler.compile("{@case: 1}")
        assert excinfo.value.name == "case"

    def test_endswitch_without_switch(self, compiler):
        with pytest.raises(MisplacedDirective):
            compiler.compile("{@endswitch}")

    def test_unclosed_switch_tolerated(self, compiler):
        assert compiler.compile("{@switch:a}{@case:1}x") == "<?php if($a == 1) { ?>x"

    def test_unclosed_switch_strict(self, strict_compiler):
        with pytest.raises(MisplacedDirective):
            strict_compiler.compile("{@switch:a}{@case:1}x")


class TestUnknownDirective:
    """Test the unknown directive error path"""

    def test_raises_with_name(self, compiler):
        with pytest.raises(UnknownDirective) as excinfo:
            compiler.compile("<li>{@fro: item in items}</li>")
        assert excinfo.value.name == "fro"
        assert excinfo.value.position == 4
        assert excinfo.value.line == 1

    def test_reports_line(self, compiler):
        with pytest.raises(UnknownDirective) as excinfo:
            compiler.compile("a\nb\n{@nope}", name="page.nut")
        assert excinfo.value.line == 3
        assert "page.nut" in str(excinfo.value)

    def test_is_syntax_error(self, compiler):
        with pytest.raises(SyntaxError):
            compiler.compile("{@nope}")


class TestSwitchStateTracker:
    """Test the tracker's Idle -> Open -> InCase -> Idle lifecycle"""

    def test_lifecycle(self):
        tracker = SwitchStateTracker()
        assert tracker.state is SwitchState.IDLE

        tracker.switch_open("$role")
        assert tracker.state is SwitchState.OPEN
        assert tracker.current.subject == "$role"

        tracker.current.case_opened = True
        assert tracker.state is SwitchState.IN_CASE

        closed = tracker.switch_close()
        assert closed.subject == "$role"
        assert tracker.state is SwitchState.IDLE
        assert tracker.current is None


class TestDiagnosticLogging:
    """Test that best-effort diagnostics reach the log at the compiler's verbosity"""

    def messages_capture(self, compiler, template):
        records = []
        handler = logger.add(
            lambda message: records.append(message.record), format="{message}", level="DEBUG"
        )
        try:
            compiler.compile(template)
        finally:
            logger.remove(handler)
        return records

    def test_malformed_for_warns(self):
        records = self.messages_capture(Compiler(settings=AppSettings(), verbosity=1), "{@for: bogus}")
        warnings = [r for r in records if r["level"].name == "WARNING"]
        assert len(warnings) == 1
        assert "cannot compile for 'bogus'" in warnings[0]["message"]

    def test_silent_at_verbosity_zero(self):
        records = self.messages_capture(Compiler(settings=AppSettings(), verbosity=0), "{@for: bogus}")
        assert records == []

    def test_debug_trace_at_verbosity_three(self):
        records = self.messages_capture(Compiler(settings=AppSettings(), verbosity=3), "{@endif}")
        assert any("Dispatching 'endif'" in r["message"] for r in records)
