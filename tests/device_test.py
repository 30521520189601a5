import pytest
from picosdk.errors import PicoSDKCtypesError

from pypicocapture.device import PicoScope4000
from pypicocapture.exceptions import CaptureTimeoutError
from pypicocapture.settings import ChannelSettings, TriggerSettings
from conftest import FakePs4000


def test_connect_opens_first_device(scope, driver):
    assert scope.handle.value == 16
    assert driver.calls[0] == 'OpenUnit'
    assert scope.status["openunit"] == 0


def test_connect_with_serial():
    driver = FakePs4000()
    PicoScope4000(serial='AB123/0042', driver=driver)
    assert driver.calls[0] == ('OpenUnitEx', b'AB123/0042')


def test_failed_call_raises():
    driver = FakePs4000()
    driver.ps4000OpenUnit = lambda handle: 3 # PICO_NOT_FOUND
    with pytest.raises(PicoSDKCtypesError):
        PicoScope4000(driver=driver)


def test_unit_info_and_model(scope):
    info = scope.unit_info()
    assert info['PICO_VARIANT_INFO'] == '4224'
    assert info['PICO_BATCH_AND_SERIAL'] == 'AB123/0042'
    assert scope.channel_count == 2
    assert scope.max_adc == 32764


def test_available_devices(scope):
    assert scope.available_devices() == ['AB123/0042', 'CD456/0043']


def test_set_channels_switches_off_unlisted_inputs():
    driver = FakePs4000(variant='4424')
    scope = PicoScope4000(driver=driver)
    scope.set_channels([ChannelSettings('PS4000_CHANNEL_A', vrange='PS4000_2V')])
    assert driver.channels[0] == (1, 1, 7)
    assert driver.channels[1] == (0, 1, 8)
    assert driver.channels[3] == (0, 1, 8)
    assert 4 not in driver.channels


def test_simple_trigger_threshold_in_adc_counts(scope, driver):
    scope.set_simple_trigger(TriggerSettings(threshold_mv=500), ChannelSettings('PS4000_CHANNEL_A').range_index)
    enable, source, threshold, direction, delay, auto_trigger = driver.trigger
    assert (enable, source, direction, delay, auto_trigger) == (1, 0, 2, 0, 1000)
    assert threshold == 3276


def test_trigger_off(scope, driver):
    scope.set_trigger_off()
    assert driver.trigger[0] == 0


def test_find_timebase_skips_invalid_indices(scope, driver):
    driver.min_timebase = 4
    timebase, interval_ns, max_samples = scope.find_timebase(2, 1000)
    assert timebase == 4
    assert interval_ns == pytest.approx(8.0)
    assert max_samples == 1000000
    assert [call[1] for call in driver.calls if call[0] == 'GetTimebase2'] == [2, 3, 4]


def test_wait_ready_polls_until_ready(scope, driver):
    driver.ready_after = 3
    scope.run_block(0, 100, 2)
    scope.wait_ready(poll_interval=0)
    assert driver._ready_polls == 3


def test_wait_ready_timeout(scope, driver):
    driver.ready_after = 10 ** 9
    scope.run_block(0, 100, 2)
    with pytest.raises(CaptureTimeoutError):
        scope.wait_ready(poll_interval=0.001, timeout=0.01)


def test_run_streaming_returns_actual_interval(scope, driver):
    driver.actual_interval = 2
    interval = scope.run_streaming(1, 3, 0, 1000, True, 1, 500)
    assert interval == 2
    assert driver.streaming_args == (1, 3, 0, 1000, 1, 1, 500)


def test_stop_and_disconnect(scope, driver):
    scope.stop()
    scope.disconnect()
    assert driver.stopped and driver.closed


def test_bandwidth_filter(scope, driver):
    scope.set_bandwidth_filter('PS4000_CHANNEL_B')
    assert driver.calls[-1] == ('SetBwFilter', 1, 1)


def test_memory_segments_and_captures(scope, driver):
    assert scope.memory_segments(16) == 500000
    scope.set_no_of_captures(10)
    assert driver.captures == 10


def test_unit_info_by_name_or_number(scope):
    assert scope.get_unit_info('PICO_CAL_DATE') == scope.get_unit_info(5) == '01Jan20'
    assert list(scope.unit_info())[-1] == 'PICO_KERNEL_VERSION'
