# Copyright (c) 2022-2024, mushroomfire in Beijing Institute of Technology
# This file is from the chillpy project, released under the BSD 3-Clause License.

from numbers import Real

import numpy as np
import taichi as ti

try:
    from box import init_box, box_length, _pbc_rec
    from ice_type import IceType
except Exception:
    from .box import init_box, box_length, _pbc_rec
    from .ice_type import IceType


def ice_mask(ice_type):
    """Select the ice cloud, i.e. every particle which is not tagged as water.

    Args:
        ice_type (np.ndarray): (:math:`N_p`) ice type per particle.

    Returns:
        np.ndarray: (:math:`N_p`) bool mask.
    """
    return np.asarray(ice_type) != IceType.water


@ti.data_oriented
class LargestIceCluster:
    """This class is used to divide particles connected within a given cutoff distance into clusters and find the largest one.
    The clusters are stored as cyclic linked lists built by the algorithm of Stoddard:
    each particle points to the next particle of the same cluster and the last one points back to the first.

    Starting from an unlinked particle :math:`i`, the ring is traversed from :math:`j = i`, every unlinked particle :math:`k > i`
    within cutoff of :math:`j` is spliced in right after :math:`j`, and the traversal stops when it comes back to :math:`i`.
    The distance follows the minimum image convention.

    .. hint:: If you use this class in your publication, you should cite the original paper:

      `Stoddard S D. Identifying clusters in computer experiments on systems of particles[J]. Journal of Computational Physics, 1978, 27(2): 291-293. <https://doi.org/10.1016/0021-9991(78)90011-9>`_

    Args:
        pos (np.ndarray): (:math:`N_p, 3`) positions of the ice particles.
        box (np.ndarray): (:math:`3, 2`) or (:math:`4, 3`) system box, must be rectangle.
        boundary (list, optional): boundary conditions, 1 is periodic and 0 is free boundary. Defaults to [1, 1, 1].
        cutoff (float, optional): cutoff distance, particles with distance <= cutoff are connected. Defaults to 3.5.

    Outputs:
        - **linked_list** (np.ndarray) - (:math:`N_p`) index of the next particle in the same cluster.
        - **cluster_start** (np.ndarray) - first particle of every cluster in discovery order.
        - **cluster_size** (np.ndarray) - particle number of every cluster.
        - **largest_cluster_size** (int) - particle number of the largest cluster, 0 for an empty input.
        - **largest_cluster_id** (int) - index of the largest cluster in cluster_start, the first one wins a tie.

    Examples:
        >>> import chillpy as cp

        >>> cp.init()

        >>> Clus = cp.LargestIceCluster(pos[mask], box, [1, 1, 1], 3.5) # Initilize LargestIceCluster class.

        >>> Clus.compute() # Do cluster calculation.

        >>> Clus.largest_cluster_size # Check the largest cluster size.

        >>> Clus.largest_cluster_members() # Obtain the particles in the largest cluster.
    """

    def __init__(self, pos, box, boundary=[1, 1, 1], cutoff=3.5):
        if not isinstance(cutoff, Real):
            raise TypeError(f"Invalid cutoff type: {type(cutoff)}")
        if cutoff <= 0:
            raise ValueError("cutoff should be a positive number.")
        self.cutoff = float(cutoff)
        pos = np.ascontiguousarray(pos, dtype=np.float64).reshape(-1, 3)
        self.pos = pos
        self.box = init_box(box)
        self.box_length = ti.Vector([float(i) for i in box_length(self.box)])
        self.boundary = ti.Vector([int(boundary[i]) for i in range(3)])
        self.is_computed = False

    @ti.kernel
    def _build_linked_list(
        self,
        pos: ti.types.ndarray(dtype=ti.math.vec3),
        linked_list: ti.types.ndarray(),
    ):
        N = pos.shape[0]
        ti.loop_config(serialize=True)
        for i in range(N - 1):
            if linked_list[i] == i:
                j = i
                while True:
                    for k in range(i + 1, N):
                        if linked_list[k] == k:
                            rij = pos[j] - pos[k]
                            rij = _pbc_rec(rij, self.boundary, self.box_length)
                            if rij.norm() <= self.cutoff:
                                tmp = linked_list[j]
                                linked_list[j] = linked_list[k]
                                linked_list[k] = tmp
                    j = linked_list[j]
                    if j == i:
                        break

    def compute(self):
        """Do the real cluster analysis."""
        N = self.pos.shape[0]
        self.linked_list = np.arange(N, dtype=np.int32)
        if N > 1:
            self._build_linked_list(self.pos, self.linked_list)

        visited = np.zeros(N, dtype=bool)
        cluster_start, cluster_size = [], []
        for i in range(N):
            if not visited[i]:
                size = 0
                j = i
                while True:
                    j = self.linked_list[j]
                    visited[j] = True
                    size += 1
                    if j == i:
                        break
                cluster_start.append(i)
                cluster_size.append(size)
        self.cluster_start = np.array(cluster_start, dtype=np.int32)
        self.cluster_size = np.array(cluster_size, dtype=np.int32)
        if N > 0:
            self.largest_cluster_id = int(np.argmax(self.cluster_size))
            self.largest_cluster_size = int(self.cluster_size[self.largest_cluster_id])
        else:
            self.largest_cluster_id = -1
            self.largest_cluster_size = 0
        self.is_computed = True

    @property
    def cluster_number(self):
        """Number of clusters."""
        if not self.is_computed:
            self.compute()
        return self.cluster_start.shape[0]

    def get_cluster_members(self, cluster_id):
        """Particle indices of one cluster in ring order, starting from the particle after its first one.

        Args:
            cluster_id (int): index in cluster_start, in the range of [0, cluster_number).

        Returns:
            np.ndarray: particle indices.
        """
        if not self.is_computed:
            self.compute()
        assert (
            0 <= cluster_id < self.cluster_number
        ), f"cluster_id should be in the range of [0, cluster_number {self.cluster_number})."
        start = self.cluster_start[cluster_id]
        members = np.zeros(self.cluster_size[cluster_id], dtype=np.int32)
        j = start
        for n in range(members.shape[0]):
            j = self.linked_list[j]
            members[n] = j
        return members

    def largest_cluster_members(self):
        """Particle indices of the largest cluster, empty for an empty input.

        Returns:
            np.ndarray: particle indices.
        """
        if not self.is_computed:
            self.compute()
        if self.largest_cluster_size == 0:
            return np.zeros(0, dtype=np.int32)
        return self.get_cluster_members(self.largest_cluster_id)


if __name__ == "__main__":
    from time import time

    ti.init(ti.cpu, default_fp=ti.f64)
    # Two chains along x, the second one crosses the periodic boundary.
    pos = np.r_[
        np.c_[np.arange(5.0), np.zeros(5), np.zeros(5)],
        np.c_[[98.5, 99.5, 0.5], [50.0] * 3, [50.0] * 3],
    ]
    start = time()
    Clus = LargestIceCluster(pos, 100.0, [1, 1, 1], 1.5)
    Clus.compute()
    end = time()
    print(f"Cal cluster time: {end-start} s.")
    print("Cluster size:", Clus.cluster_size)
    print("Largest cluster:", Clus.largest_cluster_members())
