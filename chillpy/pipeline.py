# Copyright (c) 2022-2024, mushroomfire in Beijing Institute of Technology
# This file is from the chillpy project, released under the BSD 3-Clause License.

from enum import IntEnum
from numbers import Real

from tqdm import tqdm

try:
    from bond_correlation import Variant
    from report import SaveFile
    from system import Frame
    from tool_function import timer
except Exception:
    from .bond_correlation import Variant
    from .report import SaveFile
    from .system import Frame
    from .tool_function import timer


class Stage(IntEnum):
    """Analysis stages in run order."""

    ORDER_PARAMETERS = 0
    BOND_CLASSIFICATION = 1
    ICE_TYPE_CLASSIFICATION = 2
    RECLASSIFICATION = 3
    CLUSTER_ANALYSIS = 4


_REQUIRES = {
    Stage.ORDER_PARAMETERS: (),
    Stage.BOND_CLASSIFICATION: (Stage.ORDER_PARAMETERS,),
    Stage.ICE_TYPE_CLASSIFICATION: (Stage.BOND_CLASSIFICATION,),
    Stage.RECLASSIFICATION: (Stage.ICE_TYPE_CLASSIFICATION,),
    Stage.CLUSTER_ANALYSIS: (Stage.ICE_TYPE_CLASSIFICATION,),
}


class PipelineConfig:
    """Settings of an :class:`IcePipeline`.

    Args:
        stages (list, optional): stages to run, they always run in the order of :class:`Stage`. Defaults to all stages.
        variant (str | Variant, optional): classification rule, 'chill' or 'chill+'. Defaults to "chill+".
        method (str, optional): evaluator of the spherical harmonics, 'general' or 'table'. Defaults to "table".
        cutoff (float, optional): cutoff distance of the ice cluster. Defaults to 3.5.
        slice_low (list, optional): lower limit of the slice. Defaults to None.
        slice_high (list, optional): upper limit of the slice. Defaults to None.
        report_file (str, optional): report of ice types after classification. Defaults to None, not saved.
        reclassified_report_file (str, optional): report of ice types after reclassification. Defaults to None, not saved.
        largest_cluster_dump (str, optional): DUMP trajectory of the largest cluster. Defaults to None, not saved.
    """

    def __init__(
        self,
        stages=None,
        variant="chill+",
        method="table",
        cutoff=3.5,
        slice_low=None,
        slice_high=None,
        report_file=None,
        reclassified_report_file=None,
        largest_cluster_dump=None,
    ):
        if stages is None:
            stages = list(Stage)
        self.stages = tuple(sorted(set(Stage(i) for i in stages)))
        for stage in self.stages:
            for need in _REQUIRES[stage]:
                if need not in self.stages:
                    raise ValueError(f"Stage {stage.name} needs stage {need.name}.")
        self.variant = Variant.parse(variant)
        if method not in ["general", "table"]:
            raise ValueError(
                f"Unrecognized method {method}, please choose in ['general', 'table']."
            )
        self.method = method
        if not isinstance(cutoff, Real):
            raise TypeError(f"Invalid cutoff type: {type(cutoff)}")
        if cutoff <= 0:
            raise ValueError("cutoff should be a positive number.")
        self.cutoff = float(cutoff)
        self.slice_low = slice_low
        self.slice_high = slice_high
        self.report_file = report_file
        self.reclassified_report_file = reclassified_report_file
        self.largest_cluster_dump = largest_cluster_dump

    @classmethod
    def from_dict(cls, config):
        """Build a config from a plain mapping, such as a parsed YAML file.

        Recognized keys: variant, method, cutoff, reclassify (bool), cluster (bool), report_file,
        reclassified_report_file, largest_cluster_dump, slice_low and slice_high.

        Args:
            config (dict): settings.

        Returns:
            PipelineConfig: the config.
        """
        if not isinstance(config, dict):
            raise TypeError(f"Invalid config type: {type(config)}")
        known = [
            "variant",
            "method",
            "cutoff",
            "reclassify",
            "cluster",
            "report_file",
            "reclassified_report_file",
            "largest_cluster_dump",
            "slice_low",
            "slice_high",
        ]
        for key in config.keys():
            if key not in known:
                raise ValueError(f"Unrecognized key {key}, please choose in {known}.")
        stages = [
            Stage.ORDER_PARAMETERS,
            Stage.BOND_CLASSIFICATION,
            Stage.ICE_TYPE_CLASSIFICATION,
        ]
        if config.get("reclassify", True):
            stages.append(Stage.RECLASSIFICATION)
        if config.get("cluster", True):
            stages.append(Stage.CLUSTER_ANALYSIS)
        return cls(
            stages=stages,
            variant=config.get("variant", "chill+"),
            method=config.get("method", "table"),
            cutoff=config.get("cutoff", 3.5),
            slice_low=config.get("slice_low"),
            slice_high=config.get("slice_high"),
            report_file=config.get("report_file"),
            reclassified_report_file=config.get("reclassified_report_file"),
            largest_cluster_dump=config.get("largest_cluster_dump"),
        )

    def __repr__(self):
        stages = ", ".join(stage.name for stage in self.stages)
        return f"PipelineConfig(stages=[{stages}], variant={self.variant.value}, method={self.method}, cutoff={self.cutoff})"


class FrameResult:
    """Results of one frame.

    Outputs:
        - **timestep** (int) - frame index.
        - **counts** (IceTypeCounts) - ice type numbers after classification, None if not run.
        - **reclassified_counts** (IceTypeCounts) - ice type numbers after reclassification, None if not run.
        - **largest_cluster_size** (int) - size of the largest ice cluster, None if not run.
        - **ice_type** (np.ndarray) - final ice type per particle, None if not run.
    """

    def __init__(
        self,
        timestep,
        counts=None,
        reclassified_counts=None,
        largest_cluster_size=None,
        ice_type=None,
    ):
        self.timestep = timestep
        self.counts = counts
        self.reclassified_counts = reclassified_counts
        self.largest_cluster_size = largest_cluster_size
        self.ice_type = ice_type


class IcePipeline:
    """Run the ice analysis stages on frames in a fixed order:
    order parameters, bond classification, ice type classification, reclassification of water
    with the averaged q6 and the largest ice cluster.

    Args:
        config (PipelineConfig | dict, optional): settings. Defaults to PipelineConfig().
        verbose (bool, optional): print a summary per frame. Defaults to False.

    Examples:
        >>> import chillpy as cp

        >>> cp.init()

        >>> pipeline = cp.IcePipeline({"variant": "chill+", "cutoff": 3.5, "report_file": "chillPlus.txt"})

        >>> result = pipeline.compute(frame)

        >>> result.counts.cubic, result.largest_cluster_size
    """

    def __init__(self, config=None, verbose=False):
        if config is None:
            config = PipelineConfig()
        elif isinstance(config, dict):
            config = PipelineConfig.from_dict(config)
        elif not isinstance(config, PipelineConfig):
            raise TypeError(f"Invalid config type: {type(config)}")
        self.config = config
        self.verbose = verbose

    def compute(self, frame):
        """Analyse one frame.

        Args:
            frame (Frame): the frame, its data gets the result columns.

        Returns:
            FrameResult: results of this frame.
        """
        assert isinstance(frame, Frame), "frame should be a chillpy.Frame."
        config = self.config
        stages = config.stages
        result = FrameResult(frame.timestep)
        if config.slice_low is not None or config.slice_high is not None:
            frame.set_slice(config.slice_low, config.slice_high)
        else:
            frame.set_slice()

        if Stage.ORDER_PARAMETERS in stages and Stage.BOND_CLASSIFICATION not in stages:
            frame.cal_order_parameter(3, config.method)
        if Stage.BOND_CLASSIFICATION in stages:
            frame.cal_bond_order(config.variant, config.method)
        if Stage.ICE_TYPE_CLASSIFICATION in stages:
            result.counts = frame.cal_ice_type(config.variant, config.method)
            if config.report_file is not None:
                SaveFile.write_ice_type_report(
                    config.report_file, result.counts, config.variant
                )
        if Stage.RECLASSIFICATION in stages:
            result.reclassified_counts = frame.reclassify_water(config.method)
            if config.reclassified_report_file is not None:
                SaveFile.write_ice_type_report(
                    config.reclassified_report_file,
                    result.reclassified_counts,
                    Variant.CHILL_PLUS,
                )
        if Stage.CLUSTER_ANALYSIS in stages:
            result.largest_cluster_size = frame.cal_largest_ice_cluster(config.cutoff)
            if config.largest_cluster_dump is not None:
                frame.write_largest_cluster(config.largest_cluster_dump)
        if "ice_type" in frame.data.columns:
            result.ice_type = frame.ice_type

        if self.verbose:
            summary = f"Frame {frame.timestep}:"
            if result.counts is not None:
                summary += f" {result.counts.to_line(config.variant)}"
            if result.reclassified_counts is not None:
                summary += f" | reclassified {result.reclassified_counts.to_line()}"
            if result.largest_cluster_size is not None:
                summary += f" | largest cluster {result.largest_cluster_size}"
            print(summary)
        return result

    @timer
    def run(self, frames):
        """Analyse frames one by one.

        Args:
            frames (Iterable[Frame]): frames in trajectory order.

        Returns:
            list[FrameResult]: results per frame.
        """
        results = []
        progress_bar = tqdm(frames)
        for frame in progress_bar:
            progress_bar.set_description(f"Analysing frame {frame.timestep}")
            results.append(self.compute(frame))
        return results
